import datetime as dt
import enum
from decimal import Decimal

from app.services.frontmatter import (
    FieldKind,
    build_frontmatter,
    coerce_field,
    sanitize_record,
    sanitize_value,
)


class Color(enum.Enum):
    RED = "red"


def test_empty_values_are_pruned_recursively():
    record = {
        "title": "  Hello  ",
        "blank": "   ",
        "nothing": None,
        "nan": float("nan"),
        "inf": float("inf"),
        "empty_list": [],
        "nested": {"keep": 1, "drop": "", "deeper": {"gone": None}},
        "items": ["a", "", None, " b "],
    }
    assert sanitize_record(record) == {
        "title": "Hello",
        "nested": {"keep": 1},
        "items": ["a", "b"],
    }


def test_scalars():
    assert sanitize_value(False) is False
    assert sanitize_value(0) == 0
    assert sanitize_value(Decimal("1.5")) == 1.5
    assert sanitize_value(Color.RED) == "red"
    assert sanitize_value(dt.date(2024, 5, 1)) == "2024-05-01"


def test_datetimes_are_utc_iso():
    naive = dt.datetime(2024, 5, 1, 12, 30)
    assert sanitize_value(naive) == "2024-05-01T12:30:00Z"
    offset = dt.datetime(2024, 5, 1, 14, 30, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    assert sanitize_value(offset) == "2024-05-01T12:30:00Z"


def test_coerce_field_by_kind():
    assert coerce_field(FieldKind.STRING_LIST, "a, b,,c") == ["a", "b", "c"]
    assert coerce_field(FieldKind.NUMBER, "12") == 12
    assert coerce_field(FieldKind.NUMBER, "nope") is None
    assert coerce_field(FieldKind.NUMBER, True) is None
    assert coerce_field(FieldKind.BOOLEAN, "yes") is None
    assert coerce_field(FieldKind.STRING, 5) == "5"


def test_record_fields_fill_only_missing_keys():
    article = {
        "title": "From record",
        "slug": "hello",
        "status": "draft",
        "reading_time": 4,
        "tags": ["x", ""],
        "subtitle": "",
        "fact_checked": False,
    }
    fm = build_frontmatter(article, {"title": "From metadata", "category": "news"})
    assert fm["title"] == "From metadata"
    assert fm["category"] == "news"
    assert fm["slug"] == "hello"
    assert fm["reading_time_minutes"] == 4
    assert fm["tags"] == ["x"]
    assert fm["fact_checked"] is False
    assert "subtitle" not in fm
    assert "reading_time" not in fm


def test_attribute_records():
    class Row:
        title = "Row title"
        slug = "row"
        status = "published"
        published_at = dt.datetime(2024, 1, 2, 3, 4, 5)

    fm = build_frontmatter(Row())
    assert fm == {
        "title": "Row title",
        "slug": "row",
        "status": "published",
        "published_at": "2024-01-02T03:04:05Z",
    }
