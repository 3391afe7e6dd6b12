from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import get_db
from app.exceptions import BuildError
from app.main import app
from app.services.article_store import ArticleRepository, ArticleStore
from app.services.build import BuildCoordinator
from app.services.content_store import MarkupFileStore
from app.services.revalidate import PageCache
from app.services.sync import ArticleSyncService
from app.utils.authz import require_admin


class FakeBuildRunner:
    """Stands in for the build subprocess; records every command it is given."""

    def __init__(self):
        self.commands: List[List[str]] = []
        self.fail = False
        self.gate: Optional[asyncio.Event] = None

    @property
    def runs(self) -> int:
        return len(self.commands)

    async def __call__(self, command: Sequence[str]) -> None:
        self.commands.append(list(command))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise BuildError("build exploded", returncode=1)


class RecordingRevalidator:
    def __init__(self):
        self.paths: List[str] = []

    async def revalidate(self, path: str) -> None:
        self.paths.append(path)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def content_dir(tmp_path):
    return tmp_path / "posts"


@pytest.fixture
def file_store(content_dir):
    return MarkupFileStore(root=content_dir)


@pytest.fixture
def runner():
    return FakeBuildRunner()


@pytest.fixture
def builder(runner, tmp_path):
    return BuildCoordinator(enabled=True, strict=True, cwd=tmp_path, run_command=runner)


@pytest.fixture
def revalidator():
    return RecordingRevalidator()


@pytest.fixture
def store(db_session, file_store):
    return ArticleStore(ArticleRepository(db_session), file_store)


@pytest.fixture
def service(store, builder, revalidator):
    return ArticleSyncService(store, builder, revalidator)


@pytest.fixture
def page_cache():
    return PageCache()


@pytest.fixture
def client(session_factory, file_store, builder, page_cache, monkeypatch):
    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(app.state, "file_store", file_store)
    monkeypatch.setattr(app.state, "builder", builder)
    monkeypatch.setattr(app.state, "page_cache", page_cache)
    monkeypatch.setattr(app.state, "fs_sync", True)
    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[require_admin] = lambda: None
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
