"""Process entrypoint: wire the context, subscribe to Jetstream, wait for a signal."""

from __future__ import annotations

import asyncio
import logging
import signal

from like_labeler.clients.jetstream import JetstreamClient
from like_labeler.config import Settings, apply_log_level, load_settings
from like_labeler.context import ApplicationContext

logger = logging.getLogger(__name__)


def _install_signal_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows event loops
            logger.debug("Signal handler for %s not supported on this platform", sig.name)


async def main(settings: Settings | None = None, context: ApplicationContext | None = None) -> int:
    """
    Run the labeler until SIGINT/SIGTERM. Returns the process exit code:
    0 after a signal-driven shutdown, 1 when startup or the stream fails.
    """

    try:
        settings = settings or load_settings()
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    apply_log_level(settings.core.LOG_LEVEL)
    logger.info("Starting like labeler (labeler=%s, db=%s)", settings.core.LABELER_DID, settings.storage.DB_FILE)

    try:
        context = context or ApplicationContext(settings)
    except (OSError, ValueError) as exc:
        logger.error("Failed to set up application context: %s", exc)
        return 1

    try:
        await context.initialize()
    except Exception:
        logger.exception("Application initialization failed; check labeler credentials")
        await context.shutdown()
        return 1

    handler = context.build_handler()
    jetstream = JetstreamClient(
        settings.jetstream.JETSTREAM_URL,
        settings.jetstream.WANTED_COLLECTIONS,
        on_create=handler.handle_create,
        on_delete=handler.handle_delete,
        reconnect_delay=settings.jetstream.RECONNECT_DELAY,
    )
    context.set_subscription(jetstream)

    stop = asyncio.Event()
    _install_signal_handlers(stop)

    stream_task = asyncio.create_task(jetstream.start())
    stop_task = asyncio.create_task(stop.wait())
    logger.info("Listening for likes on %s", settings.jetstream.JETSTREAM_URL)

    done, _ = await asyncio.wait({stream_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    exit_code = 0
    if stop_task in done:
        logger.info("Shutdown signal received")
    else:
        stop_task.cancel()
        exc = stream_task.exception()
        if exc is not None:
            logger.error("Jetstream listener crashed: %s", exc)
            exit_code = 1

    # Drain ingestion before the context releases the label client and store.
    await jetstream.close()
    if not stream_task.done():
        try:
            await stream_task
        except Exception:
            logger.exception("Jetstream listener failed during shutdown")

    await context.shutdown()
    return exit_code


def run() -> int:
    return asyncio.run(main())
