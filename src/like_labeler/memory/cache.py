"""
In-memory existence cache mirroring the ``likes`` table.

``LikeCache`` answers "has this process recorded this like?" without touching
SQLite. It is hydrated once at startup from :class:`~like_labeler.memory.store.LikeStore`
and then kept in step by the like hook; it is never persisted on its own.
"""

from __future__ import annotations

from typing import Iterable


def cache_key(did: str, rkey: str) -> str:
    """Return the ``did:rkey`` key used for cache membership."""

    return f"{did}:{rkey}"


class LikeCache:
    """Set of ``did:rkey`` keys for likes believed present in the store."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: set[str] = set(keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def has(self, did: str, rkey: str) -> bool:
        return cache_key(did, rkey) in self._keys

    def add(self, did: str, rkey: str) -> None:
        self._keys.add(cache_key(did, rkey))

    def discard(self, did: str, rkey: str) -> None:
        """Remove the key for ``(did, rkey)`` if present."""

        self._keys.discard(cache_key(did, rkey))

    def reset(self) -> None:
        self._keys.clear()


__all__ = ["LikeCache", "cache_key"]
