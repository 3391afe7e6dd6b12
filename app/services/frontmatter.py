# app/services/frontmatter.py
"""Build the YAML preamble written at the top of each markup file.

The static build tool treats the mere presence of a key as a type declaration,
so nothing empty is ever emitted: blank strings, empty collections, ``None``
and non-finite numbers are pruned recursively.
"""
from __future__ import annotations

import datetime as dt
import enum
import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any


class FieldKind(str, enum.Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    STRING_LIST = "string_list"
    JSON = "json"


@dataclass(frozen=True)
class FieldSpec:
    source: str
    target: str
    kind: FieldKind


FIELD_MAP: tuple[FieldSpec, ...] = (
    FieldSpec("title", "title", FieldKind.STRING),
    FieldSpec("subtitle", "subtitle", FieldKind.STRING),
    FieldSpec("excerpt", "excerpt", FieldKind.STRING),
    FieldSpec("lang", "lang", FieldKind.STRING),
    FieldSpec("seo_title", "seo_title", FieldKind.STRING),
    FieldSpec("seo_description", "seo_description", FieldKind.STRING),
    FieldSpec("canonical_url", "canonical_url", FieldKind.STRING),
    FieldSpec("robots_index", "robots_index", FieldKind.STRING),
    FieldSpec("robots_follow", "robots_follow", FieldKind.STRING),
    FieldSpec("cover_image", "cover_image", FieldKind.STRING),
    FieldSpec("cover_blurhash", "cover_blurhash", FieldKind.STRING),
    FieldSpec("cover_dominant_color", "cover_dominant_color", FieldKind.STRING),
    FieldSpec("tags", "tags", FieldKind.STRING_LIST),
    FieldSpec("reading_time", "reading_time_minutes", FieldKind.NUMBER),
    FieldSpec("word_count", "word_count", FieldKind.NUMBER),
    FieldSpec("reviewed_by", "reviewed_by", FieldKind.STRING),
    FieldSpec("reviewer_credentials", "reviewer_credentials", FieldKind.STRING),
    FieldSpec("fact_checked", "fact_checked", FieldKind.BOOLEAN),
    FieldSpec("related_articles", "related_articles", FieldKind.JSON),
    FieldSpec("tldr", "tldr", FieldKind.STRING),
    FieldSpec("key_takeaways", "key_takeaways", FieldKind.STRING_LIST),
    FieldSpec("og_image", "og_image", FieldKind.STRING),
    FieldSpec("og_title", "og_title", FieldKind.STRING),
    FieldSpec("og_description", "og_description", FieldKind.STRING),
    FieldSpec("twitter_card", "twitter_card", FieldKind.STRING),
    FieldSpec("twitter_site", "twitter_site", FieldKind.STRING),
    FieldSpec("twitter_creator", "twitter_creator", FieldKind.STRING),
    FieldSpec("slug", "slug", FieldKind.STRING),
    FieldSpec("status", "status", FieldKind.STRING),
    FieldSpec("published_at", "published_at", FieldKind.DATE),
    FieldSpec("updated_at", "updated_at", FieldKind.DATE),
)

# Preamble keys owned by a column; the record value always wins for these
COLUMN_KEYS = frozenset({s.source for s in FIELD_MAP} | {s.target for s in FIELD_MAP})


def _format_datetime(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat().replace("+00:00", "Z")


def sanitize_value(value: Any) -> Any:
    """Return a YAML-safe copy of ``value`` or ``None`` when it should be dropped."""
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    if isinstance(value, bool):
        return value
    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, dt.datetime):
        return _format_datetime(value)
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return sanitize_record(value) or None
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [s for s in (sanitize_value(v) for v in value) if s is not None]
        return items or None
    return sanitize_value(str(value))


def sanitize_record(record: Mapping | None) -> dict:
    if not isinstance(record, Mapping):
        return {}
    out = {}
    for key, value in record.items():
        clean = sanitize_value(value)
        if clean is not None:
            out[str(key)] = clean
    return out


def coerce_field(kind: FieldKind, value: Any) -> Any:
    """Bring a record value in line with its declared kind before sanitizing."""
    if value is None:
        return None
    if kind is FieldKind.STRING_LIST:
        if isinstance(value, str):
            return [part for part in (p.strip() for p in value.split(",")) if part]
        if isinstance(value, (list, tuple)):
            return [v for v in value if isinstance(v, str)]
        return None
    if kind is FieldKind.NUMBER:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float, Decimal)):
            return value
        if isinstance(value, str):
            try:
                return float(value) if "." in value else int(value)
            except ValueError:
                return None
        return None
    if kind is FieldKind.BOOLEAN:
        return value if isinstance(value, bool) else None
    if kind is FieldKind.STRING:
        if isinstance(value, enum.Enum):
            return value.value
        return value if isinstance(value, str) else str(value)
    return value


def _read_field(article: Any, name: str) -> Any:
    if isinstance(article, Mapping):
        return article.get(name)
    return getattr(article, name, None)


def build_frontmatter(article: Any, metadata: Mapping | None = None) -> dict:
    """Explicit ``metadata`` first, then record fields for keys still missing."""
    frontmatter = sanitize_record(metadata)
    for spec in FIELD_MAP:
        if spec.target in frontmatter:
            continue
        value = sanitize_value(coerce_field(spec.kind, _read_field(article, spec.source)))
        if value is not None:
            frontmatter[spec.target] = value
    return frontmatter
