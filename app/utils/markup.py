# app/utils/markup.py
"""Rich text (HTML) <-> portable markup (Markdown/MDX) conversion."""
import markdown2
from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

# Soft line breaks render as <br>: the editor shows a typed newline as a break.
MARKDOWN_EXTRAS = {
    "fenced-code-blocks": None,
    "tables": None,
    "strike": None,
    "breaks": {"on_newline": True},
}

_CONVERTER_OPTIONS = {
    "heading_style": ATX,
    "bullets": "-",
    "code_language": "",
}

_DROPPED_TAGS = ("script", "style")


class PortableMarkdownConverter(MarkdownConverter):
    """markdownify converter that never loses an image's alt or title."""

    def convert_img(self, el, text, *args, **kwargs):
        src = el.attrs.get("src") or ""
        if not src:
            return ""
        alt = el.attrs.get("alt") or ""
        title = el.attrs.get("title") or ""
        title_part = ' "%s"' % title.replace('"', r"\"") if title else ""
        return "![%s](%s%s)" % (alt, src, title_part)


def rich_text_to_portable(html: str | None) -> str:
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_DROPPED_TAGS):
        tag.decompose()
    return PortableMarkdownConverter(**_CONVERTER_OPTIONS).convert_soup(soup).strip()


def portable_to_rich_text(markup: str | None) -> str:
    if not markup or not markup.strip():
        return ""
    return str(markdown2.markdown(markup, extras=MARKDOWN_EXTRAS))
