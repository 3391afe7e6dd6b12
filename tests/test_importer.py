import logging

from app.schemas import ArticleCreate, ArticleUpdate
from app.services.content_store import ArticleFile, parse_document
from app.services.importer import (
    import_from_files,
    parse_status,
    row_fields_from_file,
    title_from_slug,
    to_boolean,
    to_optional_int,
    to_string_list,
)


def _write(content_dir, name, text):
    content_dir.mkdir(parents=True, exist_ok=True)
    (content_dir / name).write_text(text, encoding="utf-8")


def test_coercion_helpers():
    assert to_optional_int("7") == 7
    assert to_optional_int("7.9") == 7
    assert to_optional_int(True) is None
    assert to_optional_int("nan") is None
    assert to_boolean("Yes") is True
    assert to_boolean("off") is False
    assert to_boolean("maybe") is False
    assert to_string_list("a, b ,") == ["a", "b"]
    assert to_string_list(["x", 3, " "]) == ["x"]
    assert parse_status("PUBLISHED") == "published"
    assert parse_status("weird") == "draft"
    assert title_from_slug("my_first-post") == "My First Post"


def test_row_fields_from_file_defaults():
    file = ArticleFile(
        slug="found",
        preamble={"cover_asset_id": "asset://covers/found.png", "tags": "a, b", "fact_checked": "true"},
        body="\nHello there\n",
    )
    row = row_fields_from_file(file)

    assert row["title"] == "Found"
    assert row["status"] == "draft"
    assert row["lang"] == "en"
    assert row["robots_index"] == "index"
    assert row["robots_follow"] == "follow"
    assert row["cover_image"] == "asset://covers/found.png"
    assert row["og_image"] == "asset://covers/found.png"
    assert row["tags"] == ["a", "b"]
    assert row["fact_checked"] is True
    assert row["raw_markup"] == "Hello there"
    assert row["meta"]["permalink"] == "/blog/post/found"
    assert "slug" not in row["meta"]
    assert "tags" not in row["meta"]
    assert row["meta"]["cover_asset_id"] == "asset://covers/found.png"


async def test_imports_unknown_files_once(service, store, content_dir, runner):
    await service.create(ArticleCreate(slug="existing", content="db body"))
    builds_before = runner.runs
    _write(content_dir, "dropped.mdx", "---\ntitle: Dropped In\nstatus: published\n---\nFrom disk\n")

    assert await import_from_files(store, service.builder) == 1
    assert runner.runs == builds_before + 1
    assert await store.known_slugs() == {"existing", "dropped"}

    imported = await store.fetch_by_slug("dropped")
    assert imported.title == "Dropped In"
    assert imported.status == "published"
    assert imported.raw_markup == "From disk"

    assert await import_from_files(store, service.builder) == 0
    assert runner.runs == builds_before + 1


async def test_list_reconciles_files_first(service, content_dir):
    _write(content_dir, "bootstrap.mdx", "---\ntitle: Bootstrap\n---\nbody\n")
    articles = await service.list()
    assert [a.slug for a in articles] == ["bootstrap"]


async def test_failed_row_is_skipped(store, builder, content_dir, monkeypatch, caplog):
    _write(content_dir, "good.mdx", "---\ntitle: Good\n---\nbody\n")
    _write(content_dir, "bad.mdx", "---\ntitle: Bad\n---\nbody\n")

    original = store.insert

    async def _insert(fields):
        if fields["slug"] == "bad":
            raise RuntimeError("datastore hiccup")
        return await original(fields)

    monkeypatch.setattr(store, "insert", _insert)
    with caplog.at_level(logging.ERROR):
        assert await import_from_files(store, builder) == 1
    assert "bad.mdx" in caplog.text
    assert await store.known_slugs() == {"good"}


async def test_imported_article_rename_leaves_one_row(service, store, content_dir):
    _write(content_dir, "a.mdx", "---\ntitle: Alpha\nslug: a\nstatus: draft\ncategory: notes\n---\nbody\n")
    [imported] = await service.list()

    await service.update(imported.id, ArticleUpdate(slug="b"))

    preamble, _ = parse_document((content_dir / "b.mdx").read_text(encoding="utf-8"))
    assert preamble["slug"] == "b"
    assert preamble["category"] == "notes"
    assert not (content_dir / "a.mdx").exists()
    assert [a.slug for a in await service.list()] == ["b"]


async def test_imported_draft_publish_updates_preamble(service, content_dir):
    _write(content_dir, "draft.mdx", "---\ntitle: Draft\nstatus: draft\n---\nbody\n")
    [imported] = await service.list()

    await service.publish(imported.id)

    preamble, _ = parse_document((content_dir / "draft.mdx").read_text(encoding="utf-8"))
    assert preamble["status"] == "published"
    assert "published_at" in preamble
