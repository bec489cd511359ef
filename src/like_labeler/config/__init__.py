"""Application configuration"""

import logging
from pathlib import Path
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .storage import Storage
from .jetstream import Jetstream
from .labels import Labels

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("aiohttp").setLevel(logging.WARNING)


class Settings:
    """All configuration sections resolved from one raw config mapping."""

    def __init__(self, raw: dict | None = None) -> None:
        self.core = Core(raw)
        self.storage = Storage(raw)
        self.jetstream = Jetstream(raw)
        self.labels = Labels(raw)


def load_settings(path: str | Path | None = None) -> Settings:
    """Build a fresh :class:`Settings` from ``path`` (or config.toml) and the environment."""
    return Settings(load_raw_config(path))


def apply_log_level(level: str) -> None:
    """Reset the root logger level, falling back to INFO for unknown names."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        logging.getLogger(__name__).warning("Unknown LOG_LEVEL %r; using INFO", level)
        resolved = logging.INFO
    logging.getLogger().setLevel(resolved)


__all__ = [
    "Settings",
    "load_settings",
    "apply_log_level",
    "LOG_FORMAT",
    "DATE_FORMAT",
]
