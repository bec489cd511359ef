"""
Static trigger table and label metadata.

The catalog lives in ``data/labels.toml`` (overridable via ``LABELS_FILE``).
Each ``[[labels]]`` entry names a label identifier, the post URI whose likes
apply it, and the locale strings used when the labeler declares its label
values. Shared definition defaults (severity, blurs, default setting, adult-only
flag) come from the ``[defaults]`` table.

The catalog is loaded once at startup and treated as read-only afterwards;
:class:`~like_labeler.event_hooks.like_hook.LikeHandler` only ever sees the
``trigger_map`` view (post URI -> label value).
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re
import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass(frozen=True)
class LabelLocale:
    lang: str
    name: str
    description: str


@dataclass(frozen=True)
class LabelDefinition:
    """One label value plus the post whose likes assert it."""

    identifier: str
    trigger_uri: str | None
    locales: tuple[LabelLocale, ...] = ()

    def display_name(self) -> str:
        return self.locales[0].name if self.locales else self.identifier


@dataclass(frozen=True)
class LabelDefaults:
    severity: str = "inform"
    blurs: str = "none"
    default_setting: str = "warn"
    adult_only: bool = False


@dataclass(frozen=True)
class LabelCatalog:
    labels: tuple[LabelDefinition, ...]
    defaults: LabelDefaults = field(default_factory=LabelDefaults)

    @property
    def trigger_map(self) -> Mapping[str, str]:
        """Read-only ``post URI -> label value`` view."""
        return MappingProxyType(
            {label.trigger_uri: label.identifier for label in self.labels if label.trigger_uri}
        )


def _parse_locale(raw: Mapping[str, Any]) -> LabelLocale:
    return LabelLocale(
        lang=str(raw.get("lang", "en")),
        name=str(raw.get("name", "")),
        description=str(raw.get("description", "")),
    )


def _parse_label(raw: Mapping[str, Any]) -> LabelDefinition:
    identifier = str(raw.get("identifier", "")).strip()
    if not _IDENTIFIER_RE.match(identifier):
        raise ValueError(f"Invalid label identifier: {identifier!r}")

    trigger_uri = raw.get("trigger_uri")
    if trigger_uri is not None:
        trigger_uri = str(trigger_uri).strip()
        if not trigger_uri.startswith("at://"):
            raise ValueError(f"Trigger URI for {identifier} is not an AT URI: {trigger_uri!r}")

    locales = tuple(_parse_locale(loc) for loc in raw.get("locales", []))
    return LabelDefinition(identifier=identifier, trigger_uri=trigger_uri or None, locales=locales)


def build_catalog(raw: Mapping[str, Any]) -> LabelCatalog:
    """Validate a decoded ``labels.toml`` document and build a :class:`LabelCatalog`."""

    defaults_raw = raw.get("defaults", {})
    defaults = LabelDefaults(
        severity=str(defaults_raw.get("severity", "inform")),
        blurs=str(defaults_raw.get("blurs", "none")),
        default_setting=str(defaults_raw.get("default_setting", "warn")),
        adult_only=bool(defaults_raw.get("adult_only", False)),
    )

    labels: list[LabelDefinition] = []
    seen_ids: set[str] = set()
    seen_uris: set[str] = set()
    for entry in raw.get("labels", []):
        label = _parse_label(entry)
        if label.identifier in seen_ids:
            raise ValueError(f"Duplicate label identifier: {label.identifier}")
        if label.trigger_uri and label.trigger_uri in seen_uris:
            raise ValueError(f"Trigger URI mapped twice: {label.trigger_uri}")
        seen_ids.add(label.identifier)
        if label.trigger_uri:
            seen_uris.add(label.trigger_uri)
        labels.append(label)

    return LabelCatalog(labels=tuple(labels), defaults=defaults)


def load_catalog(path: str | Path) -> LabelCatalog:
    """Read and validate the label catalog at ``path``."""

    target = Path(path)
    with target.open("rb") as handle:
        catalog = build_catalog(tomllib.load(handle))

    logger.info(
        "Loaded %d label definition(s), %d trigger post(s) from %s",
        len(catalog.labels),
        len(catalog.trigger_map),
        target,
    )
    return catalog


__all__ = [
    "LabelLocale",
    "LabelDefinition",
    "LabelDefaults",
    "LabelCatalog",
    "build_catalog",
    "load_catalog",
]
