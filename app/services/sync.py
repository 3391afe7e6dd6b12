# app/services/sync.py
"""Keeps the articles table, the markup directory and the static build in step.

Every write goes database -> markup file -> build trigger, in that order, so a
crash part-way leaves the authoritative row ahead of the derivable file.
"""
from __future__ import annotations

import datetime as dt
import enum
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from app.exceptions import ArticleNotFound, ArticleValidationError, SlugConflictError
from app.models.article import Article
from app.schemas import ArticleCreate, ArticleUpdate
from app.services.article_store import ArticleStore, StoreError, StoreErrorKind
from app.services.build import BuildCoordinator
from app.services.frontmatter import build_frontmatter
from app.services.importer import import_from_files, title_from_slug
from app.services.revalidate import Revalidator, article_paths, revalidate_paths
from app.utils.markup import portable_to_rich_text

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
LISTING_PATHS = ("/", "/blog")

_word_re = re.compile(r"[\w'’-]+", re.UNICODE)


class SyncState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    SYNCING_FILE = "syncing_file"
    TRIGGERING = "triggering"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    operation: str
    article: Optional[Article] = None
    content: str = ""
    file_written: bool = False
    history: List[SyncState] = field(default_factory=lambda: [SyncState.IDLE])

    @property
    def state(self) -> SyncState:
        return self.history[-1]

    def advance(self, state: SyncState) -> None:
        logger.debug("%s: %s -> %s", self.operation, self.state.value, state.value)
        self.history.append(state)


def content_stats(body: str) -> Tuple[int, int]:
    """(word count, reading minutes) for a markup body."""
    words = len(_word_re.findall(body or ""))
    minutes = max(1, math.ceil(words / WORDS_PER_MINUTE))
    return words, minutes


def _preamble_without_timestamp(article: Any) -> Dict[str, Any]:
    preamble = build_frontmatter(article, getattr(article, "meta", None))
    preamble.pop("updated_at", None)
    return preamble


def _translate(e: StoreError, slug: Optional[str]) -> Exception:
    if e.kind is StoreErrorKind.UNIQUE_VIOLATION:
        return SlugConflictError(slug)
    if e.kind is StoreErrorKind.NOT_FOUND:
        return ArticleNotFound(str(e))
    return e


class ArticleSyncService:
    def __init__(
        self,
        store: ArticleStore,
        builder: BuildCoordinator,
        revalidator: Optional[Revalidator] = None,
    ):
        self.store = store
        self.builder = builder
        self.revalidator = revalidator

    # ---------- helpers ----------
    async def _durable(self, coro, slug: Optional[str] = None):
        try:
            return await coro
        except StoreError as e:
            translated = _translate(e, slug)
            if translated is e:
                raise
            raise translated from e

    @staticmethod
    def _row_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
        """Payload fields -> column values (content becomes raw + rendered markup)."""
        row = dict(fields)
        if "slug" in row and isinstance(row["slug"], str):
            row["slug"] = row["slug"].strip()
        if "title" in row and isinstance(row["title"], str):
            row["title"] = row["title"].strip()
        if "content" in row:
            body = row.pop("content") or ""
            row["raw_markup"] = body
            row["rendered_markup"] = portable_to_rich_text(body)
            words, minutes = content_stats(body)
            if row.get("word_count") is None:
                row["word_count"] = words
            if row.get("reading_time") is None:
                row["reading_time"] = minutes
        return row

    async def _sync_file(self, outcome: SyncOutcome, article: Article, body: str) -> None:
        outcome.advance(SyncState.SYNCING_FILE)
        outcome.file_written = await self.store.write_file(
            article.slug, build_frontmatter(article, article.meta), body
        )

    async def _trigger(self, outcome: SyncOutcome) -> None:
        outcome.advance(SyncState.TRIGGERING)
        await self.builder.trigger()

    # ---------- reads ----------
    async def get(self, article_id: int) -> Tuple[Article, str]:
        article = await self._durable(self.store.fetch(article_id))
        body = await self.store.read_body(article.slug)
        return article, body if body is not None else (article.raw_markup or "")

    async def list(self, status: Optional[str] = None, reconcile: bool = True) -> List[Article]:
        if reconcile and self.store.sync_enabled:
            if await import_from_files(self.store, self.builder):
                await revalidate_paths(self.revalidator, LISTING_PATHS)
        return await self._durable(self.store.fetch_all(status))

    # ---------- writes ----------
    async def create(self, payload: ArticleCreate) -> SyncOutcome:
        outcome = SyncOutcome("create")
        try:
            outcome.advance(SyncState.VALIDATING)
            slug = (payload.slug or "").strip()
            if not slug:
                raise ArticleValidationError("Slug is required.")
            if payload.content is None:
                raise ArticleValidationError("Article content is required.")

            fields = payload.model_dump(exclude_unset=True)
            fields["slug"] = slug
            if not (fields.get("title") or "").strip():
                fields["title"] = title_from_slug(slug)
            fields["status"] = fields.get("status") or "draft"
            row = self._row_fields(fields)

            outcome.advance(SyncState.PERSISTING)
            article = await self._durable(self.store.insert(row), slug)
            outcome.article = article
            outcome.content = payload.content

            if self.store.sync_enabled:
                try:
                    await self._sync_file(outcome, article, payload.content)
                except Exception:
                    logger.exception("Writing the markup file for new article '%s' failed; rolling back", slug)
                    try:
                        await self.store.remove(article.id)
                    except Exception:
                        logger.exception("Rollback of article '%s' failed", slug)
                    raise
                await self._trigger(outcome)
            outcome.advance(SyncState.DONE)
        except Exception:
            outcome.advance(SyncState.FAILED)
            raise

        await revalidate_paths(self.revalidator, [*LISTING_PATHS, *article_paths(article.meta, article.slug)])
        return outcome

    async def update(self, article_id: int, payload: ArticleUpdate) -> SyncOutcome:
        outcome = SyncOutcome("update")
        try:
            outcome.advance(SyncState.VALIDATING)
            fields = payload.model_dump(exclude_unset=True)
            has_content = "content" in fields
            if "slug" in fields and not (fields["slug"] or "").strip():
                raise ArticleValidationError("Slug is required.")
            if has_content and fields["content"] is None:
                raise ArticleValidationError("Article content is required.")
            if "title" in fields and not (fields["title"] or "").strip():
                raise ArticleValidationError("Title cannot be empty.")
            if "status" in fields and fields["status"] is None:
                fields.pop("status")

            existing = await self._durable(self.store.fetch(article_id))
            # Snapshot before the row object is mutated in place
            old_slug = existing.slug
            old_meta = dict(existing.meta or {})
            old_preamble = _preamble_without_timestamp(existing)
            row = self._row_fields(fields)

            outcome.advance(SyncState.PERSISTING)
            updated = await self._durable(self.store.update(article_id, row), row.get("slug"))
            outcome.article = updated
            new_slug = updated.slug

            if has_content:
                body = fields["content"]
            else:
                file_body = await self.store.read_body(old_slug)
                body = file_body if file_body is not None else (updated.raw_markup or "")
            outcome.content = body

            changed = (
                has_content
                or new_slug != old_slug
                or _preamble_without_timestamp(updated) != old_preamble
            )
            if self.store.sync_enabled and changed:
                await self._sync_file(outcome, updated, body)
                if new_slug != old_slug:
                    await self.store.remove_file(old_slug)
                await self._trigger(outcome)
            outcome.advance(SyncState.DONE)
        except Exception:
            outcome.advance(SyncState.FAILED)
            raise

        await revalidate_paths(
            self.revalidator,
            [
                *LISTING_PATHS,
                *article_paths(old_meta, old_slug),
                *article_paths(updated.meta, new_slug),
            ],
        )
        return outcome

    async def delete(self, article_id: int) -> SyncOutcome:
        outcome = SyncOutcome("delete")
        try:
            outcome.advance(SyncState.VALIDATING)
            article = await self._durable(self.store.fetch(article_id))
            slug, meta = article.slug, dict(article.meta or {})

            outcome.advance(SyncState.PERSISTING)
            await self._durable(self.store.remove(article_id), slug)

            if self.store.sync_enabled:
                outcome.advance(SyncState.SYNCING_FILE)
                await self.store.remove_file(slug)
                await self._trigger(outcome)
            outcome.advance(SyncState.DONE)
        except Exception:
            outcome.advance(SyncState.FAILED)
            raise

        await revalidate_paths(self.revalidator, [*LISTING_PATHS, *article_paths(meta, slug)])
        return outcome

    async def publish(self, article_id: int) -> SyncOutcome:
        return await self.update(
            article_id,
            ArticleUpdate(status="published", published_at=dt.datetime.now(dt.timezone.utc)),
        )

    async def unpublish(self, article_id: int) -> SyncOutcome:
        return await self.update(article_id, ArticleUpdate(status="draft"))
