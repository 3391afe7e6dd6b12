# app/services/importer.py
"""Imports markup files that have no database row yet.

Lets a content directory bootstrap an empty database and picks up files
dropped in by hand while the datastore was unavailable.
"""
from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from app.models.article import ARTICLE_STATUSES
from app.services.content_store import ArticleFile
from app.services.frontmatter import COLUMN_KEYS, sanitize_record
from app.utils.markup import portable_to_rich_text

if TYPE_CHECKING:
    from app.services.article_store import ArticleStore
    from app.services.build import BuildCoordinator

logger = logging.getLogger(__name__)

DEFAULT_LANG = "en"

_TRUE_WORDS = ("true", "1", "yes", "y", "on")
_FALSE_WORDS = ("false", "0", "no", "n", "off")


def to_optional_string(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    v = value.strip()
    return v or None


def to_optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return int(parsed) if math.isfinite(parsed) else None
    return None


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE_WORDS:
            return True
        if v in _FALSE_WORDS:
            return False
    return False


def to_string_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, list):
        items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return items or None
    if isinstance(value, str) and value.strip():
        return [item.strip() for item in value.split(",") if item.strip()]
    return None


def parse_status(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in ARTICLE_STATUSES:
        return value.strip().lower()
    return "draft"


def title_from_slug(slug: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in re.split(r"[-_]+", slug) if part)


def row_fields_from_file(file: ArticleFile) -> Dict[str, Any]:
    """Column values for a markup file; preamble keys without a column are kept as metadata."""
    fm = dict(file.preamble)
    if not to_optional_string(fm.get("slug")):
        fm["slug"] = file.slug

    cover = to_optional_string(fm.get("cover_image") or fm.get("cover_asset_id") or fm.get("og_image_asset_id"))
    body = file.body.strip()

    meta = sanitize_record({k: v for k, v in fm.items() if k not in COLUMN_KEYS})
    if not to_optional_string(meta.get("permalink")):
        meta["permalink"] = f"/blog/post/{file.slug}"

    return {
        "slug": file.slug,
        "title": to_optional_string(fm.get("title")) or title_from_slug(file.slug),
        "subtitle": to_optional_string(fm.get("subtitle")),
        "excerpt": to_optional_string(fm.get("excerpt") or fm.get("description")),
        "raw_markup": body,
        "rendered_markup": portable_to_rich_text(body),
        "status": parse_status(fm.get("status")),
        "lang": to_optional_string(fm.get("lang") or fm.get("in_language")) or DEFAULT_LANG,
        "seo_title": to_optional_string(fm.get("seo_title")),
        "seo_description": to_optional_string(fm.get("seo_description")),
        "canonical_url": to_optional_string(fm.get("canonical_url")),
        "robots_index": to_optional_string(fm.get("robots_index")) or "index",
        "robots_follow": to_optional_string(fm.get("robots_follow")) or "follow",
        "cover_image": cover,
        "og_image": to_optional_string(fm.get("og_image") or fm.get("og_image_asset_id")) or cover,
        "cover_blurhash": to_optional_string(fm.get("cover_blurhash")),
        "cover_dominant_color": to_optional_string(fm.get("cover_dominant_color")),
        "reviewed_by": to_optional_string(fm.get("reviewed_by")),
        "reviewer_credentials": to_optional_string(fm.get("reviewer_credentials")),
        "fact_checked": to_boolean(fm.get("fact_checked")),
        "tldr": to_optional_string(fm.get("tldr")),
        "reading_time": to_optional_int(fm.get("reading_time_minutes", fm.get("reading_time"))),
        "word_count": to_optional_int(fm.get("word_count")),
        "tags": to_string_list(fm.get("tags") or fm.get("article_tags")),
        "key_takeaways": to_string_list(fm.get("key_takeaways")),
        "meta": meta,
    }


async def import_from_files(store: "ArticleStore", builder: "BuildCoordinator") -> int:
    """Create rows for markup files whose slug is unknown; returns how many were imported."""
    files = await store.list_files()
    if not files:
        return 0

    known = await store.known_slugs()
    imported = 0
    for file in files:
        if file.slug in known:
            continue
        try:
            await store.insert(row_fields_from_file(file))
        except Exception:
            logger.exception("Failed to import article from %s", file.path)
            continue
        known.add(file.slug)
        imported += 1
        logger.info("Imported article '%s' from %s", file.slug, file.path)

    if imported:
        await builder.trigger()
    return imported
