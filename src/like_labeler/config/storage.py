import os
from pathlib import Path

_DEFAULT_DB_PATH = Path("data") / "likes.db"


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        storage_cfg = (config or {}).get("likelabeler", {}).get("storage", {})
        self.DB_FILE: str = str(storage_cfg.get("db_file", os.getenv("DB_FILE", str(_DEFAULT_DB_PATH))))
