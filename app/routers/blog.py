# app/routers/blog.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.deps import get_article_store
from app.schemas import PreviewListResponse
from app.services.article_store import ArticleStore, StoreError, StoreErrorKind
from app.services.previews import published_previews
from app.services.revalidate import extract_permalink

router = APIRouter(tags=["blog"])

HOME_LATEST = 9


def _templates(request: Request):
    """Use the shared Jinja instance + helpers registered in main.py."""
    return request.app.state.templates


def _render(request: Request, name: str, **context) -> str:
    return _templates(request).get_template(name).render(request=request, **context)


def _cached(request: Request, path: str):
    return request.app.state.page_cache.get(path)


def _remember(request: Request, path: str, html: str) -> HTMLResponse:
    request.app.state.page_cache.put(path, html)
    return HTMLResponse(html)


def _not_found(request: Request) -> HTMLResponse:
    html = _render(request, "pages/not_found.html", title="Not found")
    return HTMLResponse(html, status_code=404)


# ---------- Listings ----------
@router.get("/", response_class=HTMLResponse)
async def home(request: Request, store: ArticleStore = Depends(get_article_store)):
    html = _cached(request, "/")
    if html is not None:
        return HTMLResponse(html)
    _, previews = await published_previews(store)
    html = _render(
        request,
        "blog/index.html",
        title="Home",
        latest=previews[0] if previews else None,
        latest_list=previews[:HOME_LATEST],
    )
    return _remember(request, "/", html)


@router.get("/blog", response_class=HTMLResponse)
async def blog_list(request: Request, store: ArticleStore = Depends(get_article_store)):
    html = _cached(request, "/blog")
    if html is not None:
        return HTMLResponse(html)
    _, previews = await published_previews(store)
    html = _render(request, "blog/list.html", title="Blog", articles=previews)
    return _remember(request, "/blog", html)


@router.get("/api/public/articles", response_model=PreviewListResponse)
async def public_articles(store: ArticleStore = Depends(get_article_store)):
    source, previews = await published_previews(store)
    return PreviewListResponse(source=source, articles=previews)


# ---------- Single post ----------
@router.get("/blog/post/{slug}", response_class=HTMLResponse)
async def show_post(slug: str, request: Request, store: ArticleStore = Depends(get_article_store)):
    path = f"/blog/post/{slug}"
    html = _cached(request, path)
    if html is not None:
        return HTMLResponse(html)

    try:
        article = await store.fetch_by_slug(slug)
    except StoreError as e:
        if e.kind is StoreErrorKind.NOT_FOUND:
            return _not_found(request)
        raise
    if article.status != "published":
        return _not_found(request)

    body = await store.read_body(article.slug)
    html = _render(
        request,
        "blog/post.html",
        title=article.seo_title or article.title,
        article=article,
        lang=article.lang,
        body=body if body is not None else (article.raw_markup or ""),
        permalink=extract_permalink(article.meta, article.slug),
    )
    return _remember(request, path, html)
