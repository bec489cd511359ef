"""
Like-state memory package.

Modules
=======

``store``
    Defines :class:`~like_labeler.memory.store.LikeStore`, the SQLite-backed
    durable record of every like that matched a trigger post.
``cache``
    Provides :class:`~like_labeler.memory.cache.LikeCache`, the in-memory
    existence set mirroring the store so delete events for unknown likes are
    rejected without a database round trip.
"""

from .cache import LikeCache, cache_key
from .store import LikeRecord, LikeStore, StoreClosedError

__all__ = ["LikeCache", "cache_key", "LikeRecord", "LikeStore", "StoreClosedError"]
