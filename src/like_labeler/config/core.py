import os


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("likelabeler", {})
        labeler_cfg = cfg.get("labeler", {})

        password_env = str(labeler_cfg.get("password_env", "LABELER_PASSWORD"))

        self.LABELER_DID: str | None = labeler_cfg.get("did") or os.getenv("LABELER_DID")
        self.LABELER_IDENTIFIER: str | None = labeler_cfg.get("identifier") or os.getenv("LABELER_IDENTIFIER")
        self.LABELER_PASSWORD: str | None = os.getenv(password_env)
        self.LABELER_SERVICE_URL: str = str(
            labeler_cfg.get("service_url", os.getenv("LABELER_SERVICE_URL", "https://bsky.social"))
        )
        self.LOG_LEVEL: str = str(cfg.get("log_level", os.getenv("LOG_LEVEL", "INFO"))).upper()

        required = [
            ("LABELER_DID", self.LABELER_DID),
            ("LABELER_IDENTIFIER", self.LABELER_IDENTIFIER),
            ("LABELER_PASSWORD", self.LABELER_PASSWORD),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
