import os
from pathlib import Path

_DEFAULT_LABELS_FILE = Path(__file__).resolve().parent.parent / "data" / "labels.toml"


class Labels:
    def __init__(self, config: dict | None = None) -> None:
        labels_cfg = (config or {}).get("likelabeler", {}).get("labels", {})
        self.LABELS_FILE: str = str(labels_cfg.get("labels_file", os.getenv("LABELS_FILE", str(_DEFAULT_LABELS_FILE))))
