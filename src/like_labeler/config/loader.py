from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict


DEFAULT_CONFIG_PATH = Path("config.toml")
CONFIG_PATH_ENV = "LIKELABELER_CONFIG"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Explicit path, then ``$LIKELABELER_CONFIG``, then ./config.toml."""
    if path is not None:
        return Path(path)
    return Path(os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load the ``[likelabeler]`` config document.

    A missing file yields an empty dict; every section then reads its values
    from environment variables instead.
    """
    target = resolve_config_path(path)
    if not target.is_file():
        return {}

    with target.open("rb") as handle:
        return tomllib.load(handle)


__all__ = ["load_raw_config", "resolve_config_path", "DEFAULT_CONFIG_PATH", "CONFIG_PATH_ENV"]
