import os
from typing import List

_DEFAULT_COLLECTIONS = "app.bsky.feed.like"


def _split_collections(raw: str) -> List[str]:
    return [token.strip() for token in raw.split(",") if token.strip()]


class Jetstream:
    def __init__(self, config: dict | None = None) -> None:
        js_cfg = (config or {}).get("likelabeler", {}).get("jetstream", {})
        self.JETSTREAM_URL: str = str(
            js_cfg.get("url", os.getenv("JETSTREAM_URL", "wss://jetstream2.us-east.bsky.network/subscribe"))
        )
        collections_cfg = js_cfg.get("wanted_collections")
        if collections_cfg:
            self.WANTED_COLLECTIONS: List[str] = [str(c) for c in collections_cfg]
        else:
            self.WANTED_COLLECTIONS = _split_collections(
                os.getenv("JETSTREAM_COLLECTIONS", _DEFAULT_COLLECTIONS)
            )
        self.RECONNECT_DELAY: float = float(js_cfg.get("reconnect_delay", os.getenv("RECONNECT_DELAY", "5")))
