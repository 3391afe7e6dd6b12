# app/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.article_store import ArticleRepository, ArticleStore
from app.services.sync import ArticleSyncService


def get_article_store(request: Request, db: Session = Depends(get_db)) -> ArticleStore:
    state = request.app.state
    files = state.file_store if state.fs_sync else None
    return ArticleStore(ArticleRepository(db), files)


def get_sync_service(request: Request, store: ArticleStore = Depends(get_article_store)) -> ArticleSyncService:
    state = request.app.state
    return ArticleSyncService(store, state.builder, state.page_cache)
