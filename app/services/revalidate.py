# app/services/revalidate.py
import asyncio
import logging
from typing import Dict, Iterable, Optional, Protocol

logger = logging.getLogger(__name__)


class Revalidator(Protocol):
    async def revalidate(self, path: str) -> None: ...


def normalize_path(path: Optional[str]) -> str:
    if not path:
        return "/"
    return path if path.startswith("/") else f"/{path}"


def extract_permalink(meta, slug: str) -> str:
    if isinstance(meta, dict):
        permalink = meta.get("permalink")
        if isinstance(permalink, str) and permalink.strip():
            return normalize_path(permalink.strip())
    return normalize_path(f"/blog/post/{slug}")


class PageCache:
    """Rendered public pages keyed by path; revalidating a path evicts it."""

    def __init__(self):
        self._pages: Dict[str, str] = {}

    def get(self, path: str) -> Optional[str]:
        return self._pages.get(normalize_path(path))

    def put(self, path: str, html: str) -> None:
        self._pages[normalize_path(path)] = html

    def clear(self) -> None:
        self._pages.clear()

    async def revalidate(self, path: str) -> None:
        self._pages.pop(normalize_path(path), None)


async def revalidate_paths(revalidator: Optional[Revalidator], paths: Iterable[str]) -> None:
    """Best effort: a failing path is logged and the rest still go through."""
    if revalidator is None:
        return
    unique = list(dict.fromkeys(normalize_path(p) for p in paths))

    async def _one(path: str) -> None:
        try:
            await revalidator.revalidate(path)
        except Exception:
            logger.warning("Failed to revalidate %s", path, exc_info=True)

    await asyncio.gather(*(_one(p) for p in unique))


def article_paths(meta, slug: str) -> tuple:
    """The permalink plus the canonical post route, which the page cache keys on."""
    return extract_permalink(meta, slug), normalize_path(f"/blog/post/{slug}")
