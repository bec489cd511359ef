#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from atproto import AsyncClient, models

from like_labeler.config import load_settings
from like_labeler.triggers import LabelCatalog, load_catalog

logger = logging.getLogger("register_labels")

LABELER_COLLECTION = "app.bsky.labeler.service"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python scripts/register_labels.py",
        description="Declare the labeler's label values on Bluesky (overwrites the existing declaration).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config TOML (defaults to ./config.toml when present).",
    )
    parser.add_argument(
        "--labels",
        type=Path,
        default=None,
        help="Label catalog TOML (overrides LABELS_FILE).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the definitions without contacting Bluesky.",
    )
    return parser


def build_label_definitions(catalog: LabelCatalog) -> list[dict[str, Any]]:
    defaults = catalog.defaults
    definitions = []
    for label in catalog.labels:
        locales = [
            {"lang": loc.lang, "name": loc.name, "description": loc.description}
            for loc in label.locales
        ] or [{"lang": "en", "name": label.display_name(), "description": label.identifier}]
        definitions.append(
            {
                "identifier": label.identifier,
                "severity": defaults.severity,
                "blurs": defaults.blurs,
                "defaultSetting": defaults.default_setting,
                "adultOnly": defaults.adult_only,
                "locales": locales,
            }
        )
    return definitions


def build_service_record(definitions: list[dict[str, Any]], created_at: str) -> dict[str, Any]:
    return {
        "$type": LABELER_COLLECTION,
        "policies": {
            "labelValues": [d["identifier"] for d in definitions],
            "labelValueDefinitions": definitions,
        },
        "createdAt": created_at,
    }


def _print_summary(definitions: list[dict[str, Any]]) -> None:
    print(f"Label definitions to register: {len(definitions)}")
    for index, definition in enumerate(definitions, start=1):
        name = definition["locales"][0]["name"]
        print(f"  [{index:02d}] {definition['identifier']:<25} - {name}")


async def register(
    service_url: str,
    identifier: str,
    password: str,
    definitions: list[dict[str, Any]],
    client: AsyncClient | None = None,
) -> str:
    """Put the ``app.bsky.labeler.service/self`` record; returns its URI."""

    client = client or AsyncClient(base_url=service_url)
    profile = await client.login(identifier, password)

    record = build_service_record(definitions, client.get_current_time_iso())
    response = await client.com.atproto.repo.put_record(
        models.ComAtprotoRepoPutRecord.Data(
            repo=profile.did,
            collection=LABELER_COLLECTION,
            rkey="self",
            record=record,
        )
    )
    return response.uri


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    catalog = load_catalog(args.labels or settings.labels.LABELS_FILE)
    definitions = build_label_definitions(catalog)
    _print_summary(definitions)

    if args.dry_run:
        print("Dry run; nothing registered.")
        return 0

    print(f"Registering as {settings.core.LABELER_IDENTIFIER} ({settings.core.LABELER_DID})...")
    try:
        uri = asyncio.run(
            register(
                settings.core.LABELER_SERVICE_URL,
                settings.core.LABELER_IDENTIFIER,
                settings.core.LABELER_PASSWORD,
                definitions,
            )
        )
    except Exception:
        logger.exception("Label registration failed")
        return 1

    print(f"Registered {len(definitions)} label(s): {uri}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
