"""
Satellite catalog: tracked object models, search ranking and snapshot store.
"""

from .database import CatalogSnapshot, SatelliteDatabase
from .models import ObjectType, OrbitSummary, TrackedObject
from .scheduler import CatalogRefresher
from .search import fuzzy_score, rank_matches

__all__ = [
    "CatalogRefresher",
    "CatalogSnapshot",
    "ObjectType",
    "OrbitSummary",
    "SatelliteDatabase",
    "TrackedObject",
    "fuzzy_score",
    "rank_matches",
]
