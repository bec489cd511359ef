"""
Minimal Jetstream subscriber.

Jetstream serves the Bluesky firehose as JSON over a websocket. Commit events
for the wanted collections are decoded here and forwarded to async callbacks:
``on_create(did, rkey, record)`` and ``on_delete(did, rkey)``. Each callback is
awaited before the next frame is read, so events are handled one at a time.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Sequence
from urllib.parse import urlencode

import aiohttp

logger = logging.getLogger(__name__)

CreateCallback = Callable[[str, str, Any], Awaitable[None]]
DeleteCallback = Callable[[str, str], Awaitable[None]]


class JetstreamClient:
    def __init__(
        self,
        endpoint: str,
        wanted_collections: Sequence[str],
        on_create: CreateCallback,
        on_delete: DeleteCallback,
        *,
        reconnect_delay: float = 5.0,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        self.endpoint = endpoint
        self.wanted_collections = list(wanted_collections)
        self.on_create = on_create
        self.on_delete = on_delete
        self.reconnect_delay = reconnect_delay
        self.cursor: int | None = None
        self._session_factory = session_factory
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._stopped = asyncio.Event()
        # Held while a callback runs; close() waits on it before returning.
        self._dispatch_lock = asyncio.Lock()
        self._dispatch_task: asyncio.Task | None = None

    @property
    def closed(self) -> bool:
        return self._stopped.is_set()

    def build_url(self) -> str:
        params: list[tuple[str, str]] = [("wantedCollections", c) for c in self.wanted_collections]
        if self.cursor is not None:
            params.append(("cursor", str(self.cursor)))
        if not params:
            return self.endpoint
        return f"{self.endpoint}?{urlencode(params)}"

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    async def dispatch(self, event: dict[str, Any]) -> None:
        """Route one decoded Jetstream event to the matching callback."""

        time_us = event.get("time_us")
        if isinstance(time_us, int):
            self.cursor = time_us

        if event.get("kind") != "commit":
            return

        commit = event.get("commit") or {}
        if commit.get("collection") not in self.wanted_collections:
            return

        did = event.get("did")
        rkey = commit.get("rkey")
        if not isinstance(did, str) or not isinstance(rkey, str):
            logger.debug("Dropping commit without did/rkey: %s", event)
            return

        operation = commit.get("operation")
        async with self._dispatch_lock:
            if self._stopped.is_set():
                logger.debug("Listener closed; dropping %s for did=%s rkey=%s", operation, did, rkey)
                return
            self._dispatch_task = asyncio.current_task()
            try:
                if operation == "create":
                    await self.on_create(did, rkey, commit.get("record"))
                elif operation == "delete":
                    await self.on_delete(did, rkey)
            except Exception:
                logger.exception("Uncaught error in %s handler for did=%s rkey=%s", operation, did, rkey)
            finally:
                self._dispatch_task = None

    async def _handle_text(self, data: str) -> None:
        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            logger.warning("Skipping undecodable Jetstream frame (%d bytes)", len(data))
            return
        if isinstance(event, dict):
            await self.dispatch(event)

    # ------------------------------------------------------------------ #
    # Connection lifecycle
    # ------------------------------------------------------------------ #

    async def _consume(self) -> None:
        async with self._session_factory() as session:
            async with session.ws_connect(self.build_url(), heartbeat=30) as ws:
                self._ws = ws
                logger.info("Jetstream connected: %s", self.endpoint)
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        await self._handle_text(msg.data)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.error("Jetstream websocket error: %s", ws.exception())
                        break

    async def start(self) -> None:
        """Consume events until :meth:`close` is called, reconnecting on drops."""

        while not self._stopped.is_set():
            try:
                await self._consume()
            except aiohttp.ClientError as exc:
                logger.error("Jetstream connection failed: %s", exc)
            finally:
                self._ws = None

            if self._stopped.is_set():
                break

            logger.warning("Jetstream connection closed; reconnecting in %.1fs", self.reconnect_delay)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.reconnect_delay)
            except asyncio.TimeoutError:
                pass

        logger.info("Jetstream listener stopped")

    async def close(self) -> None:
        """Stop reading and wait for an in-flight callback to finish."""

        self._stopped.set()
        # A callback closing its own listener must not wait on itself.
        if self._dispatch_task is not asyncio.current_task():
            async with self._dispatch_lock:
                pass
        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()


__all__ = ["JetstreamClient"]
