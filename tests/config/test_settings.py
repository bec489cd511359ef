import logging

import pytest

from like_labeler.config import Settings, apply_log_level, load_settings


def test_defaults_from_environment(monkeypatch):
    monkeypatch.delenv("DB_FILE", raising=False)
    monkeypatch.delenv("JETSTREAM_URL", raising=False)
    monkeypatch.delenv("JETSTREAM_COLLECTIONS", raising=False)

    settings = Settings()

    assert settings.core.LABELER_DID == "did:plc:testlabeler"
    assert settings.core.LABELER_SERVICE_URL
    assert settings.storage.DB_FILE.endswith("likes.db")
    assert settings.jetstream.WANTED_COLLECTIONS == ["app.bsky.feed.like"]
    assert settings.jetstream.JETSTREAM_URL.startswith("wss://")
    assert settings.labels.LABELS_FILE.endswith("labels.toml")


def test_missing_credentials_raise(monkeypatch):
    monkeypatch.delenv("LABELER_PASSWORD", raising=False)
    monkeypatch.delenv("LABELER_DID", raising=False)

    with pytest.raises(ValueError) as excinfo:
        Settings()

    assert "LABELER_DID" in str(excinfo.value)
    assert "LABELER_PASSWORD" in str(excinfo.value)


def test_toml_overrides_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_FILE", "from-env.db")
    config_file = tmp_path / "config.toml"
    config_file.write_text(
        """
[likelabeler]
log_level = "debug"

[likelabeler.labeler]
did = "did:plc:fromtoml"

[likelabeler.storage]
db_file = "from-toml.db"

[likelabeler.jetstream]
url = "wss://example.test/subscribe"
wanted_collections = ["app.bsky.feed.like", "app.bsky.feed.repost"]
reconnect_delay = 1.5
""",
        encoding="utf-8",
    )

    settings = load_settings(config_file)

    assert settings.core.LABELER_DID == "did:plc:fromtoml"
    assert settings.core.LOG_LEVEL == "DEBUG"
    assert settings.storage.DB_FILE == "from-toml.db"
    assert settings.jetstream.JETSTREAM_URL == "wss://example.test/subscribe"
    assert settings.jetstream.WANTED_COLLECTIONS == ["app.bsky.feed.like", "app.bsky.feed.repost"]
    assert settings.jetstream.RECONNECT_DELAY == 1.5


def test_missing_config_file_falls_back_to_env(tmp_path):
    settings = load_settings(tmp_path / "absent.toml")

    assert settings.core.LABELER_IDENTIFIER == "labeler.test"


def test_apply_log_level():
    root = logging.getLogger()
    previous = root.level
    try:
        apply_log_level("warning")
        assert root.level == logging.WARNING
        apply_log_level("nonsense")
        assert root.level == logging.INFO
    finally:
        root.setLevel(previous)


def test_config_path_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.toml"
    config_file.write_text('[likelabeler.storage]\ndb_file = "custom.db"\n', encoding="utf-8")
    monkeypatch.setenv("LIKELABELER_CONFIG", str(config_file))

    assert load_settings().storage.DB_FILE == "custom.db"
