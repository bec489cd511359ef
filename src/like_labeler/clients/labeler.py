"""
Label-service client.

Labels are issued through the labeler's Ozone instance: the labeler account
logs in on its PDS and every request is proxied to the labeler DID, where
``tools.ozone.moderation.emitEvent`` with a ``modEventLabel`` event creates or
negates a label value on the subject account.
"""

from __future__ import annotations

import logging
from typing import Protocol

from atproto import AsyncClient, models

logger = logging.getLogger(__name__)

LABELER_SERVICE_TYPE = "atproto_labeler"


class LabelClient(Protocol):
    """What :class:`~like_labeler.event_hooks.like_hook.LikeHandler` needs from a labeler."""

    async def create_label(self, *, uri: str, val: str, neg: bool = False) -> None: ...


class OzoneLabeler:
    """Emit label assertions/retractions for account DIDs via Ozone."""

    def __init__(
        self,
        service_url: str,
        identifier: str,
        password: str,
        labeler_did: str,
        client: AsyncClient | None = None,
    ) -> None:
        self.service_url = service_url
        self.identifier = identifier
        self.labeler_did = labeler_did
        self._password = password
        self._client = client or AsyncClient(base_url=service_url)
        self._proxied: AsyncClient | None = None

    @property
    def started(self) -> bool:
        return self._proxied is not None

    async def start(self) -> None:
        """Log in and bind the labeler proxy. Login failures propagate."""

        await self._client.login(self.identifier, self._password)
        self._proxied = self._client.with_proxy(LABELER_SERVICE_TYPE, self.labeler_did)
        logger.info(
            "Label service ready: %s via %s (labeler %s)",
            self.identifier,
            self.service_url,
            self.labeler_did,
        )

    async def create_label(self, *, uri: str, val: str, neg: bool = False) -> None:
        """
        Assert (``neg=False``) or retract (``neg=True``) label ``val`` on the
        account ``uri``.
        """

        if self._proxied is None:
            raise RuntimeError("Label service is not started")

        event = models.ToolsOzoneModerationDefs.ModEventLabel(
            create_label_vals=[] if neg else [val],
            negate_label_vals=[val] if neg else [],
        )
        data = models.ToolsOzoneModerationEmitEvent.Data(
            created_by=self.labeler_did,
            event=event,
            subject=models.ComAtprotoAdminDefs.RepoRef(did=uri),
        )
        await self._proxied.tools.ozone.moderation.emit_event(data)

    async def close(self) -> None:
        if self._proxied is None:
            return
        self._proxied = None
        logger.info("Label service session released")


__all__ = ["LabelClient", "OzoneLabeler", "LABELER_SERVICE_TYPE"]
