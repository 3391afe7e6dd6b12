# app/services/content_store.py
"""One markup file per article: a YAML preamble followed by the body.

The directory is a derived cache of the database. Environments where it cannot
be written (read-only containers, missing mounts) degrade to "no file cache"
instead of failing the request.
"""
from __future__ import annotations

import errno
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from app.config import CONTENT_DIR, CONTENT_EXTENSION, CONTENT_TEMPLATE_NAME
from app.exceptions import MarkupParseError

logger = logging.getLogger(__name__)

UNWRITABLE_ERRNOS = frozenset({errno.EROFS, errno.EACCES, errno.EPERM, errno.ENOENT})

_markup_ext_re = re.compile(r"\.mdx?$", re.IGNORECASE)
_document_re = re.compile(r"^---\s*\n([\s\S]*?)\n---\s*\n?([\s\S]*)$")

# Read once at import; os.umask can only be queried by setting it
_UMASK = os.umask(0)
os.umask(_UMASK)
FILE_MODE = 0o644 & ~_UMASK


@dataclass
class ArticleFile:
    slug: str
    preamble: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    path: Optional[Path] = None


def is_unwritable_error(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and exc.errno in UNWRITABLE_ERRNOS


def strip_markup_extension(name: str) -> str:
    return _markup_ext_re.sub("", name)


def split_document(text: str) -> Tuple[Optional[str], str]:
    """Split raw file text into (preamble source, body); no preamble gives (None, text)."""
    text = text.replace("\r\n", "\n").lstrip("\ufeff")
    m = _document_re.match(text)
    if not m:
        return None, text
    return m.group(1), m.group(2)


def parse_document(text: str) -> Tuple[Dict[str, Any], str]:
    source, body = split_document(text)
    if source is None:
        return {}, body
    try:
        preamble = yaml.safe_load(source) or {}
    except yaml.YAMLError as e:
        raise MarkupParseError(f"Invalid preamble: {e}") from e
    if not isinstance(preamble, dict):
        raise MarkupParseError("Preamble is not a mapping")
    return preamble, body


def render_document(preamble: Dict[str, Any], body: str) -> str:
    dumped = ""
    if preamble:
        dumped = yaml.safe_dump(preamble, sort_keys=False, allow_unicode=True).rstrip()
    return "\n".join(["---", dumped, "---", "", (body or "").rstrip(), ""])


def derive_slug(preamble_slug: Any, filename: str) -> str:
    fallback = strip_markup_extension(Path(filename).name)
    if not isinstance(preamble_slug, str) or not preamble_slug.strip():
        return fallback
    normalized = strip_markup_extension(preamble_slug.strip().replace("\\", "/")).lstrip("/")
    segments = [s for s in normalized.split("/") if s]
    return segments[-1] if segments else fallback


class MarkupFileStore:
    def __init__(
        self,
        root: Path | str = CONTENT_DIR,
        extension: str = CONTENT_EXTENSION,
        template_name: str = CONTENT_TEMPLATE_NAME,
    ):
        self.root = Path(root)
        self.extension = extension
        self.template_name = template_name.lower()

    def path_for(self, slug: str) -> Path:
        return self.root / f"{strip_markup_extension(slug)}{self.extension}"

    def write(self, slug: str, preamble: Dict[str, Any], body: str) -> bool:
        """Persist a file; returns False when the environment is unwritable."""
        if not slug or not isinstance(slug, str):
            raise ValueError("Cannot write a markup file without a slug")
        if not isinstance(body, str):
            raise ValueError("Cannot write a markup file without a string body")

        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            if not is_unwritable_error(e):
                raise
            logger.warning("Content directory %s is not writable (%s); file not persisted", self.root, e)
            return False

        path = self.path_for(slug)
        document = render_document(preamble, body)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.root, prefix=".tmp-", suffix=self.extension, delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(document)
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            if not is_unwritable_error(e):
                raise
            logger.warning("Could not write %s (%s); file not persisted", path, e)
            return False

        logger.info("Wrote markup file %s", path)
        return True

    def delete(self, slug: str) -> bool:
        path = self.path_for(slug)
        try:
            path.unlink()
        except OSError as e:
            if not is_unwritable_error(e):
                raise
            if e.errno != errno.ENOENT:
                logger.warning("Could not remove %s (%s)", path, e)
            return False
        logger.info("Removed markup file %s", path)
        return True

    def read(self, slug: str) -> Optional[str]:
        try:
            text = self.path_for(slug).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        _, body = split_document(text)
        return body.strip()

    def _is_listable(self, name: str) -> bool:
        lower = name.lower()
        if not lower.endswith(self.extension):
            return False
        return lower != self.template_name and not lower.startswith(("_", "."))

    def list_all(self) -> List[ArticleFile]:
        try:
            names = sorted(os.listdir(self.root))
        except FileNotFoundError:
            return []

        files: List[ArticleFile] = []
        for name in names:
            if not self._is_listable(name):
                continue
            path = self.root / name
            try:
                preamble, body = parse_document(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, MarkupParseError):
                logger.exception("Failed to read markup file %s; skipping", path)
                continue
            files.append(
                ArticleFile(slug=derive_slug(preamble.get("slug"), name), preamble=preamble, body=body, path=path)
            )
        return files
