# app/services/previews.py
"""Public listing cards, from the database or, failing that, the markup files."""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, List, Optional, Tuple

from app.config import DEFAULT_AUTHOR, DEFAULT_COVER
from app.schemas import ArticlePreview
from app.services.article_store import ArticleStore
from app.services.content_store import ArticleFile
from app.services.revalidate import extract_permalink
from app.utils.assets import resolve_asset_url

logger = logging.getLogger(__name__)


def _text(value: Any) -> str:
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    return value.strip() if isinstance(value, str) else ""


def _first(*values: Any) -> str:
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def category_title(slug: str, fallback: str = "") -> str:
    if fallback:
        return fallback
    if not slug:
        return "Uncategorized"
    return slug.replace("-", " ").replace("_", " ").strip().title()


def preview_from_row(article) -> Optional[ArticlePreview]:
    meta = article.meta if isinstance(article.meta, dict) else {}
    slug = _text(article.slug)
    title = _first(article.title, meta.get("title"))
    if not slug or not title:
        return None

    category_slug = _text(meta.get("category"))
    cover = _first(article.cover_image, meta.get("cover_asset_id"), meta.get("cover_image"), article.og_image)
    return ArticlePreview(
        id=str(article.id),
        slug=slug,
        permalink=extract_permalink(meta, slug),
        title=title,
        excerpt=_first(article.excerpt, meta.get("excerpt"), article.subtitle),
        category_slug=category_slug,
        category_title=category_title(category_slug, _text(meta.get("article_section"))),
        author_name=_first(meta.get("author")) or DEFAULT_AUTHOR,
        cover_image=resolve_asset_url(cover, DEFAULT_COVER),
        published_at=_first(meta.get("date"), article.published_at, article.updated_at, article.created_at),
    )


def preview_from_file(file: ArticleFile) -> Optional[ArticlePreview]:
    fm = file.preamble
    title = _text(fm.get("title"))
    if not title:
        return None
    category_slug = _text(fm.get("category"))
    return ArticlePreview(
        id=file.slug,
        slug=file.slug,
        permalink=extract_permalink(fm, file.slug),
        title=title,
        excerpt=_first(fm.get("excerpt"), fm.get("subtitle")),
        category_slug=category_slug,
        category_title=category_title(category_slug, _text(fm.get("article_section"))),
        author_name=_first(fm.get("author")) or DEFAULT_AUTHOR,
        cover_image=resolve_asset_url(
            _first(fm.get("cover_asset_id"), fm.get("cover_image"), fm.get("og_image_asset_id")), DEFAULT_COVER
        ),
        published_at=_first(fm.get("date"), fm.get("published_at"), fm.get("updated_at")),
    )


async def published_previews(store: ArticleStore) -> Tuple[str, List[ArticlePreview]]:
    """Returns (source, previews), newest first; source is "database" or "files"."""
    try:
        rows = await store.fetch_all("published")
    except Exception:
        logger.warning("Loading published articles from the database failed; using markup files", exc_info=True)
    else:
        previews = [p for p in (preview_from_row(r) for r in rows) if p is not None]
        previews.sort(key=lambda p: p.published_at, reverse=True)
        return "database", previews

    files = await store.list_files()
    previews = [
        p
        for p in (preview_from_file(f) for f in files if _text(f.preamble.get("status")).lower() == "published")
        if p is not None
    ]
    previews.sort(key=lambda p: p.published_at, reverse=True)
    return "files", previews
