# app/utils/assets.py
import re

from app.config import ASSET_SCHEME

_absolute_url_re = re.compile(r"^https?://", re.IGNORECASE)
_duplicate_slash_re = re.compile(r"/{2,}")


def _normalize_slashes(path: str) -> str:
    return _duplicate_slash_re.sub("/", path.replace("\\", "/"))


def _with_leading_slash(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"


def resolve_asset_url(value, fallback: str = "") -> str:
    """Turn an asset reference into a fetchable URL.

    ``asset://covers/a.png`` becomes ``/assets/covers/a.png``; absolute and
    protocol-relative URLs pass through; anything else gets one leading slash.
    Never raises: unusable input yields ``fallback``.
    """
    if not isinstance(value, str):
        return fallback
    v = value.strip()
    if not v:
        return fallback

    if v.startswith(ASSET_SCHEME):
        asset_path = v[len(ASSET_SCHEME):].strip()
        if not asset_path:
            return fallback
        return _normalize_slashes(_with_leading_slash(f"assets/{asset_path}"))

    if _absolute_url_re.match(v) or v.startswith("//"):
        return v

    return _normalize_slashes(_with_leading_slash(v))
