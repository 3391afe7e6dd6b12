import errno
import logging
import os
import stat

import pytest

from app.exceptions import MarkupParseError
from app.services import content_store
from app.services.content_store import (
    MarkupFileStore,
    derive_slug,
    parse_document,
    render_document,
    split_document,
)


def test_render_and_parse_document():
    text = render_document({"title": "Olá", "tags": ["a", "b"]}, "# Body\n\nText\n\n")
    assert text.startswith("---\ntitle: Olá\n")
    assert text.endswith("---\n\n# Body\n\nText\n")
    preamble, body = parse_document(text)
    assert preamble == {"title": "Olá", "tags": ["a", "b"]}
    assert body.strip() == "# Body\n\nText"


def test_document_without_preamble():
    assert split_document("just text") == (None, "just text")
    assert parse_document("just text") == ({}, "just text")


def test_bom_and_crlf_are_tolerated():
    preamble, body = parse_document("\ufeff---\r\ntitle: x\r\n---\r\nbody\r\n")
    assert preamble == {"title": "x"}
    assert body == "body\n"


def test_bad_preamble_raises():
    with pytest.raises(MarkupParseError):
        parse_document("---\ntitle: [unclosed\n---\nbody")
    with pytest.raises(MarkupParseError):
        parse_document("---\n- a list\n---\nbody")


@pytest.mark.parametrize(
    "preamble_slug, filename, expected",
    [
        ("hello", "other.mdx", "hello"),
        ("/blog/post/hello.mdx", "other.mdx", "hello"),
        ("posts\\hello", "other.mdx", "hello"),
        ("", "from-file.mdx", "from-file"),
        (None, "from-file.md", "from-file"),
        ("///", "from-file.mdx", "from-file"),
    ],
)
def test_derive_slug(preamble_slug, filename, expected):
    assert derive_slug(preamble_slug, filename) == expected


def test_write_read_and_delete(file_store, content_dir):
    assert file_store.write("hello", {"title": "Hello"}, "Body text") is True
    path = content_dir / "hello.mdx"
    assert path.exists()
    assert file_store.read("hello") == "Body text"
    # no temp files left behind
    assert [p.name for p in content_dir.iterdir()] == ["hello.mdx"]

    assert file_store.delete("hello") is True
    assert not path.exists()
    assert file_store.delete("hello") is False
    assert file_store.read("hello") is None


def test_write_rejects_missing_slug(file_store):
    with pytest.raises(ValueError):
        file_store.write("", {}, "body")


def test_list_all_skips_templates_hidden_and_broken(file_store, content_dir, caplog):
    content_dir.mkdir(parents=True)
    (content_dir / "one.mdx").write_text("---\ntitle: One\nslug: first\n---\nbody one\n", encoding="utf-8")
    (content_dir / "two.mdx").write_text("---\ntitle: Two\n---\nbody two\n", encoding="utf-8")
    (content_dir / "model.mdx").write_text("---\ntitle: Template\n---\n", encoding="utf-8")
    (content_dir / "_draft.mdx").write_text("---\ntitle: Hidden\n---\n", encoding="utf-8")
    (content_dir / ".tmp-x.mdx").write_text("partial", encoding="utf-8")
    (content_dir / "notes.txt").write_text("not markup", encoding="utf-8")
    (content_dir / "broken.mdx").write_text("---\ntitle: [oops\n---\nbody\n", encoding="utf-8")

    with caplog.at_level(logging.ERROR):
        files = file_store.list_all()

    assert sorted(f.slug for f in files) == ["first", "two"]
    assert "broken.mdx" in caplog.text


def test_list_all_without_directory(tmp_path):
    assert MarkupFileStore(root=tmp_path / "missing").list_all() == []


def test_unwritable_directory_degrades(file_store, monkeypatch, caplog):
    def _denied(*args, **kwargs):
        raise PermissionError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(content_store.tempfile, "NamedTemporaryFile", _denied)
    with caplog.at_level(logging.WARNING):
        assert file_store.write("hello", {"title": "Hello"}, "Body") is False
    assert "not persisted" in caplog.text


def test_other_write_errors_propagate(file_store, monkeypatch):
    def _broken(*args, **kwargs):
        raise OSError(errno.EIO, "I/O error")

    monkeypatch.setattr(content_store.tempfile, "NamedTemporaryFile", _broken)
    with pytest.raises(OSError):
        file_store.write("hello", {"title": "Hello"}, "Body")


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_written_files_follow_the_umask(file_store, content_dir):
    file_store.write("readable", {"title": "Readable"}, "Body")
    mode = stat.S_IMODE((content_dir / "readable.mdx").stat().st_mode)
    assert mode == content_store.FILE_MODE
    assert mode == 0o644 & ~_current_umask()


def _current_umask():
    mask = os.umask(0)
    os.umask(mask)
    return mask
