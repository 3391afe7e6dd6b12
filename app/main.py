# app/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.sessions import SessionMiddleware

from app.config import (
    ASSETS_DIR,
    BASE_DIR,
    CONTENT_FS_SYNC,
    DATABASE_URL,
    LOG_LEVEL,
    SECRET_KEY,
    TEMPLATES_DIR,
)
from app.db.base import Base
from app.db.session import engine
from app.exceptions import ContentError
from app.routers.admin import router as admin_router
from app.routers.blog import router as blog_router
from app.services.build import BuildCoordinator
from app.services.content_store import MarkupFileStore
from app.services.revalidate import PageCache
from app.utils.assets import resolve_asset_url
from app.utils.markup import portable_to_rich_text

from app import models  # noqa: F401  (register tables on Base.metadata)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the sqlite data directory and any missing tables on startup."""
    if DATABASE_URL.startswith("sqlite"):
        (BASE_DIR / "data").mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("Blog started (markup sync %s)", "on" if app.state.fs_sync else "off")
    yield
    logger.info("Blog shutting down")


app = FastAPI(title="Blog", lifespan=lifespan)

# =============================================================================
# Middleware
# =============================================================================
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY)
app.add_middleware(GZipMiddleware, minimum_size=500)

# =============================================================================
# Static & Templates
# =============================================================================
app.mount("/assets", StaticFiles(directory=str(ASSETS_DIR), check_dir=False), name="assets")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["asset"] = resolve_asset_url
templates.env.filters["md"] = portable_to_rich_text
# Footer/helper: use as {{ now().year }}
templates.env.globals["now"] = lambda: datetime.now()

# =============================================================================
# Shared services
# =============================================================================
app.state.templates = templates
app.state.file_store = MarkupFileStore()
app.state.builder = BuildCoordinator()
app.state.page_cache = PageCache()
app.state.fs_sync = CONTENT_FS_SYNC

# =============================================================================
# Errors
# =============================================================================
@app.exception_handler(ContentError)
async def handle_content_error(request: Request, exc: ContentError):
    return JSONResponse(exc.to_dict(), status_code=exc.code)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)

# =============================================================================
# Routes
# =============================================================================
@app.get("/health")
def health():
    return {"status": "healthy"}


app.include_router(admin_router)   # /api/...
app.include_router(blog_router)    # /, /blog, /blog/post/{slug}
