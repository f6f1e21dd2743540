"""
In-process caches.

Exports: ListCache, TTLListCache
"""

from .list_cache import ListCache, TTLListCache

__all__ = ["ListCache", "TTLListCache"]
