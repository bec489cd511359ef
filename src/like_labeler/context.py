"""
Application context: owns the like store, existence cache, label client and
Jetstream subscription, and runs startup/shutdown in a fixed order.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from like_labeler.clients.jetstream import JetstreamClient
from like_labeler.clients.labeler import OzoneLabeler
from like_labeler.config import Settings
from like_labeler.event_hooks.like_hook import LikeHandler
from like_labeler.memory import LikeCache, LikeStore
from like_labeler.triggers import LabelCatalog, load_catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheInitResult:
    success: bool
    count: int
    error: Optional[BaseException] = None


class ApplicationContext:
    def __init__(
        self,
        settings: Settings,
        *,
        store: LikeStore | None = None,
        labeler: OzoneLabeler | None = None,
        catalog: LabelCatalog | None = None,
    ) -> None:
        self.settings = settings
        self.catalog = catalog or load_catalog(settings.labels.LABELS_FILE)
        self.store = store or LikeStore(settings.storage.DB_FILE)
        self.cache = LikeCache()
        self.labeler = labeler or OzoneLabeler(
            service_url=settings.core.LABELER_SERVICE_URL,
            identifier=settings.core.LABELER_IDENTIFIER,
            password=settings.core.LABELER_PASSWORD,
            labeler_did=settings.core.LABELER_DID,
        )
        self.subscription: JetstreamClient | None = None
        self._shutting_down = False

    @property
    def trigger_map(self):
        return self.catalog.trigger_map

    async def initialize_cache(self) -> CacheInitResult:
        """Load every stored like into the cache. Never raises."""

        try:
            likes = await self.store.get_all_likes()
        except Exception as exc:
            logger.error("Cache initialization failed: %s", exc)
            return CacheInitResult(success=False, count=0, error=exc)

        self.cache.reset()
        for like in likes:
            self.cache.add(like.did, like.rkey)
        logger.info("Cache initialized with %d like(s)", len(self.cache))
        return CacheInitResult(success=True, count=len(self.cache))

    async def initialize(self) -> None:
        """Start the label service, then warm the cache. Either failure aborts startup."""

        logger.info("Initializing application...")
        await self.labeler.start()

        result = await self.initialize_cache()
        if not result.success:
            raise result.error or RuntimeError("Cache initialization failed")

    def build_handler(self) -> LikeHandler:
        labeler = self.labeler if self.labeler.started else None
        return LikeHandler(self.store, self.cache, labeler, self.trigger_map)

    def set_subscription(self, subscription: JetstreamClient) -> None:
        self.subscription = subscription

    async def shutdown(self) -> None:
        """
        Stop ingestion, release the label service, then close the store.
        Repeat calls are no-ops.
        """

        if self._shutting_down:
            logger.debug("Shutdown already in progress")
            return
        self._shutting_down = True

        logger.info("Shutting down...")

        if self.subscription is not None:
            try:
                await self.subscription.close()
                logger.info("Jetstream closed")
            except Exception:
                logger.exception("Failed to close Jetstream subscription")

        try:
            await self.labeler.close()
        except Exception:
            logger.exception("Failed to close label service")

        try:
            await self.store.close()
        except Exception:
            logger.exception("Failed to close like store")

        logger.info("Shutdown complete")


__all__ = ["ApplicationContext", "CacheInitResult"]
