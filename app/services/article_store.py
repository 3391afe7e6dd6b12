# app/services/article_store.py
"""Two-tier article storage.

The durable tier is the relational ``articles`` table; the derived tier is the
markup directory, which can always be rebuilt from the table (and vice versa
through the importer). Blocking work in either tier runs in the threadpool.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.models.article import Article
from app.services.content_store import ArticleFile, MarkupFileStore

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"
SLUG_CONSTRAINT = "articles_slug_key"


class StoreErrorKind(enum.Enum):
    UNIQUE_VIOLATION = "unique_violation"
    NOT_FOUND = "not_found"
    OTHER = "other"


class StoreError(Exception):
    def __init__(self, kind: StoreErrorKind, message: str = "", constraint: Optional[str] = None):
        super().__init__(message or kind.value)
        self.kind = kind
        self.constraint = constraint


def classify_integrity_error(exc: IntegrityError) -> StoreError:
    """Map a driver error to a StoreError using the driver's own error codes."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)

    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return StoreError(StoreErrorKind.UNIQUE_VIOLATION, str(orig), constraint or SLUG_CONSTRAINT)
    # sqlite3 exposes the extended result code name on Python 3.11+
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return StoreError(StoreErrorKind.UNIQUE_VIOLATION, str(orig), SLUG_CONSTRAINT)
    return StoreError(StoreErrorKind.OTHER, str(orig))


class ArticleRepository:
    """Read/write contract over the articles table."""

    def __init__(self, db: Session):
        self.db = db

    def list(self, status: Optional[str] = None) -> List[Article]:
        try:
            query = self.db.query(Article)
            if status:
                query = query.filter(Article.status == status)
            return query.order_by(desc(Article.created_at), desc(Article.id)).all()
        except SQLAlchemyError as e:
            raise StoreError(StoreErrorKind.OTHER, str(e)) from e

    def slugs(self) -> set:
        try:
            return {row.slug for row in self.db.query(Article.slug).all()}
        except SQLAlchemyError as e:
            raise StoreError(StoreErrorKind.OTHER, str(e)) from e

    def get(self, article_id: int) -> Article:
        try:
            article = self.db.get(Article, article_id)
        except SQLAlchemyError as e:
            raise StoreError(StoreErrorKind.OTHER, str(e)) from e
        if article is None:
            raise StoreError(StoreErrorKind.NOT_FOUND, f"Article {article_id} not found")
        return article

    def get_by_slug(self, slug: str) -> Article:
        try:
            article = self.db.query(Article).filter(Article.slug == slug).first()
        except SQLAlchemyError as e:
            raise StoreError(StoreErrorKind.OTHER, str(e)) from e
        if article is None:
            raise StoreError(StoreErrorKind.NOT_FOUND, f"Article '{slug}' not found")
        return article

    def _commit(self, article: Optional[Article] = None) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise classify_integrity_error(e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(StoreErrorKind.OTHER, str(e)) from e
        if article is not None:
            self.db.refresh(article)

    def create(self, fields: Dict[str, Any]) -> Article:
        article = Article(**fields)
        self.db.add(article)
        self._commit(article)
        return article

    def update(self, article_id: int, fields: Dict[str, Any]) -> Article:
        article = self.get(article_id)
        for key, val in fields.items():
            if hasattr(article, key):
                setattr(article, key, val)
        self.db.add(article)
        self._commit(article)
        return article

    def delete(self, article_id: int) -> None:
        article = self.get(article_id)
        self.db.delete(article)
        self._commit()


class ArticleStore:
    """Durable repository plus the optional derived markup tier behind one interface."""

    def __init__(self, repository: ArticleRepository, files: Optional[MarkupFileStore] = None):
        self.durable = repository
        self.derived = files

    @property
    def sync_enabled(self) -> bool:
        return self.derived is not None

    # ---- durable tier ----
    async def insert(self, fields: Dict[str, Any]) -> Article:
        return await run_in_threadpool(self.durable.create, fields)

    async def update(self, article_id: int, fields: Dict[str, Any]) -> Article:
        return await run_in_threadpool(self.durable.update, article_id, fields)

    async def remove(self, article_id: int) -> None:
        await run_in_threadpool(self.durable.delete, article_id)

    async def fetch(self, article_id: int) -> Article:
        return await run_in_threadpool(self.durable.get, article_id)

    async def fetch_by_slug(self, slug: str) -> Article:
        return await run_in_threadpool(self.durable.get_by_slug, slug)

    async def fetch_all(self, status: Optional[str] = None) -> List[Article]:
        return await run_in_threadpool(self.durable.list, status)

    async def known_slugs(self) -> set:
        return await run_in_threadpool(self.durable.slugs)

    # ---- derived tier ----
    async def write_file(self, slug: str, preamble: Dict[str, Any], body: str) -> bool:
        if self.derived is None:
            return False
        return await run_in_threadpool(self.derived.write, slug, preamble, body)

    async def remove_file(self, slug: str) -> bool:
        if self.derived is None:
            return False
        return await run_in_threadpool(self.derived.delete, slug)

    async def read_body(self, slug: str) -> Optional[str]:
        if self.derived is None:
            return None
        try:
            return await run_in_threadpool(self.derived.read, slug)
        except (OSError, UnicodeDecodeError):
            logger.exception("Could not read markup file for '%s'; using the stored body", slug)
            return None

    async def list_files(self) -> List[ArticleFile]:
        if self.derived is None:
            return []
        return await run_in_threadpool(self.derived.list_all)
