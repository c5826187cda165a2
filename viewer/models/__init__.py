"""Models package - entities held by the viewer services."""

from viewer.models.cache import CacheEntry

__all__ = [
    "CacheEntry",
]
