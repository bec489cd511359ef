"""
Reconcile like create/delete events with label state.

A like on a trigger post is persisted, cached, and answered with a label
assertion on the liker. Deleting that like retracts the label and drops the
local record. Delivery is at-least-once and may arrive out of order, so every
step is idempotent and nothing raised here reaches the Jetstream loop.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from like_labeler.clients.labeler import LabelClient
from like_labeler.memory.cache import LikeCache
from like_labeler.memory.store import LikeStore

logger = logging.getLogger(__name__)


def _subject_uri(record: Any) -> str | None:
    """Pull ``subject.uri`` from a like record given as a mapping or model."""

    if record is None:
        return None
    if isinstance(record, Mapping):
        subject = record.get("subject")
    else:
        subject = getattr(record, "subject", None)

    if subject is None:
        return None
    if isinstance(subject, Mapping):
        uri = subject.get("uri")
    else:
        uri = getattr(subject, "uri", None)
    return uri if isinstance(uri, str) and uri else None


class LikeHandler:
    def __init__(
        self,
        store: LikeStore,
        cache: LikeCache,
        labeler: LabelClient | None,
        trigger_map: Mapping[str, str],
    ) -> None:
        self.store = store
        self.cache = cache
        self.labeler = labeler
        self.trigger_map = trigger_map

    async def handle_create(self, did: str, rkey: str, record: Any) -> None:
        """
        Record a like on a trigger post and assert its label on ``did``.
        """

        try:
            subject_uri = _subject_uri(record)
            if not subject_uri:
                logger.debug("Like create without subject: did=%s rkey=%s", did, rkey)
                return

            label = self.trigger_map.get(subject_uri)
            if not label:
                logger.debug("Like create on non-trigger post %s (did=%s)", subject_uri, did)
                return

            logger.info("Trigger like: did=%s rkey=%s subject=%s label=%s", did, rkey, subject_uri, label)

            await self.store.add_like(did, rkey, subject_uri)
            self.cache.add(did, rkey)

            await self._emit_label(did, label, negate=False)
        except Exception:
            logger.exception("Like create handling failed: did=%s rkey=%s", did, rkey)

    async def handle_delete(self, did: str, rkey: str) -> None:
        """
        Retract the label for a recorded like, then forget the like.
        """

        try:
            if not self.cache.has(did, rkey):
                logger.debug("Like delete for unrecorded like: did=%s rkey=%s", did, rkey)
                return

            trigger_uri = await self.store.get_trigger_uri(did, rkey)
            if trigger_uri is None:
                logger.warning("Cached like missing from store: did=%s rkey=%s", did, rkey)
                self.cache.discard(did, rkey)
                return

            label = self.trigger_map.get(trigger_uri)
            if not label:
                logger.warning(
                    "No label mapped for stored trigger %s; dropping like did=%s rkey=%s",
                    trigger_uri,
                    did,
                    rkey,
                )
                await self._forget(did, rkey)
                return

            # Retract before forgetting so a crash in between leaves the record.
            await self._emit_label(did, label, negate=True)
            await self._forget(did, rkey)
            logger.info("Like removed: did=%s rkey=%s label=%s", did, rkey, label)
        except Exception:
            logger.exception("Like delete handling failed: did=%s rkey=%s", did, rkey)

    async def _forget(self, did: str, rkey: str) -> None:
        await self.store.remove_like(did, rkey)
        self.cache.discard(did, rkey)

    async def _emit_label(self, did: str, label: str, *, negate: bool) -> None:
        action = "retract" if negate else "assert"

        if self.labeler is None:
            logger.error("Cannot %s label %s on %s: label service not configured", action, label, did)
            return

        try:
            await self.labeler.create_label(uri=did, val=label, neg=negate)
        except Exception as exc:
            logger.error("Label %s failed: did=%s label=%s error=%s", action, did, label, exc)
            return

        logger.info("Label %s ok: did=%s label=%s", action, did, label)


__all__ = ["LikeHandler"]
