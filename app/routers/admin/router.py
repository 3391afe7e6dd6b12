# app/routers/admin/router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from app.deps import get_sync_service
from app.models.article import ARTICLE_STATUSES
from app.schemas import (
    ArticleCreate,
    ArticleResponse,
    ArticleUpdate,
    PortablePayload,
    RichTextPayload,
)
from app.services.sync import ArticleSyncService
from app.utils.authz import require_admin
from app.utils.markup import portable_to_rich_text, rich_text_to_portable

router = APIRouter(prefix="/api", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------- Helpers ----------------
def _payload(article, content: str) -> ArticleResponse:
    return ArticleResponse.model_validate(article).model_copy(update={"content": content or ""})
# -----------------------------------------


# --------------- List ---------------------
@router.get("/articles", response_model=list[ArticleResponse])
async def article_list(
    status: Optional[str] = Query(None, description="draft, published or archived"),
    sync: ArticleSyncService = Depends(get_sync_service),
):
    # Unknown status values list everything rather than nothing
    wanted = status if status in ARTICLE_STATUSES else None
    articles = await sync.list(wanted)
    return [_payload(a, a.raw_markup) for a in articles]
# -----------------------------------------


# --------------- Create -------------------
@router.post("/articles", response_model=ArticleResponse, status_code=201)
async def article_create(payload: ArticleCreate, sync: ArticleSyncService = Depends(get_sync_service)):
    outcome = await sync.create(payload)
    return _payload(outcome.article, outcome.content)
# -----------------------------------------


# --------------- Read / Update / Delete ---
@router.get("/articles/{article_id}", response_model=ArticleResponse)
async def article_detail(article_id: int, sync: ArticleSyncService = Depends(get_sync_service)):
    article, content = await sync.get(article_id)
    return _payload(article, content)


@router.put("/articles/{article_id}", response_model=ArticleResponse)
async def article_update(
    article_id: int,
    payload: ArticleUpdate,
    sync: ArticleSyncService = Depends(get_sync_service),
):
    outcome = await sync.update(article_id, payload)
    return _payload(outcome.article, outcome.content)


@router.delete("/articles/{article_id}", status_code=204)
async def article_delete(article_id: int, sync: ArticleSyncService = Depends(get_sync_service)):
    await sync.delete(article_id)
    return Response(status_code=204)


@router.post("/articles/{article_id}/publish", response_model=ArticleResponse)
async def article_publish(article_id: int, sync: ArticleSyncService = Depends(get_sync_service)):
    outcome = await sync.publish(article_id)
    return _payload(outcome.article, outcome.content)


@router.post("/articles/{article_id}/unpublish", response_model=ArticleResponse)
async def article_unpublish(article_id: int, sync: ArticleSyncService = Depends(get_sync_service)):
    outcome = await sync.unpublish(article_id)
    return _payload(outcome.article, outcome.content)
# -----------------------------------------


# --------------- Markup conversion --------
@router.post("/markup/portable")
def markup_to_portable(payload: RichTextPayload):
    """Body: {"html": "..."}  Returns: {"markup": "..."}"""
    return {"markup": rich_text_to_portable(payload.html)}


@router.post("/markup/rich-text")
def markup_to_rich_text(payload: PortablePayload):
    """Body: {"markup": "..."}  Returns: {"html": "..."}"""
    return {"html": portable_to_rich_text(payload.markup)}
# -----------------------------------------
