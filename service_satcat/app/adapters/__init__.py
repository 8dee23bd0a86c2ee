"""
Space-Track adapter for the satellite catalog gateway.
"""

from .spacetrack_client import (
    CATALOG_QUERY_PATH,
    LOGIN_PATH,
    PERTURBATION_QUERY_PATH,
    SpaceTrackClient,
    perturbation_path,
)

__all__ = [
    "CATALOG_QUERY_PATH",
    "LOGIN_PATH",
    "PERTURBATION_QUERY_PATH",
    "SpaceTrackClient",
    "perturbation_path",
]
