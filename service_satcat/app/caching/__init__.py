"""
Gateway caching package.

Holds the time-bounded perturbation cache. Entries expire lazily: a stale
entry is simply fetched again on its next request.
"""

from .perturbation_cache import CacheEntry, PerturbationCache, normalize_object_id

__all__ = ["CacheEntry", "PerturbationCache", "normalize_object_id"]
