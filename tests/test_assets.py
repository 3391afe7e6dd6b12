import pytest

from app.utils.assets import resolve_asset_url


@pytest.mark.parametrize(
    "value, expected",
    [
        ("asset://covers/hero.png", "/assets/covers/hero.png"),
        ("asset:///covers//hero.png", "/assets/covers/hero.png"),
        ("https://cdn.example.com/a.png", "https://cdn.example.com/a.png"),
        ("http://cdn.example.com/a.png", "http://cdn.example.com/a.png"),
        ("//cdn.example.com/a.png", "//cdn.example.com/a.png"),
        ("images/a.png", "/images/a.png"),
        ("/images/a.png", "/images/a.png"),
        ("  images\\nested\\a.png ", "/images/nested/a.png"),
    ],
)
def test_resolves_references(value, expected):
    assert resolve_asset_url(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "asset://", "asset://   ", 42, ["a.png"]])
def test_unusable_input_yields_fallback(value):
    assert resolve_asset_url(value, "/assets/logo/default-cover.png") == "/assets/logo/default-cover.png"
    assert resolve_asset_url(value) == ""
