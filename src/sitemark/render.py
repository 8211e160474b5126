"""Render syntax trees to HTML relative to a position in the site tree."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import singledispatch
from typing import Any

from sitemark.config import SITEMARK_INCLUDE_TOC, SITEMARK_STYLESHEET
from sitemark.exceptions import SlotResolutionError
from sitemark.schemas import (
    AnchorLocation,
    Bold,
    Image,
    InlineTerm,
    InternalLocation,
    Italic,
    Link,
    Location,
    Page,
    Paragraph,
    Preformatted,
    Section,
    Slot,
    Text,
    UrlLocation,
)
from sitemark.site import InternalPath

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
        "\\": "&#92;",
    }
)
_MAX_HEADING_LEVEL = 6


def escape_html(text: str) -> str:
    """Escape `& < > " ' \\` in a single pass; everything else is copied verbatim."""
    return text.translate(_ESCAPES)


@dataclass(frozen=True)
class Context:
    """Rendering context: the internal path of the page being rendered."""

    location: InternalPath

    def href(self, location: Location | Slot) -> str:
        """Resolve a location to an (unescaped) href valid from the current page."""
        if isinstance(location, Slot):
            raise SlotResolutionError(f"slot `{location.expression}` was not resolved before rendering")
        if isinstance(location, InternalLocation):
            path, hash_mark, anchor = location.literal.partition("#")
            href = self.location.href_to(InternalPath.parse(path))
            return href + hash_mark + anchor
        if isinstance(location, AnchorLocation):
            return "#" + location.literal
        if isinstance(location, UrlLocation):
            return location.literal
        raise TypeError(f"unknown location type {type(location).__name__}")

    def render(self, value: Any) -> str:
        return render(value, self)


class Renderable(ABC):
    """A value supplied by the embedding program that knows how to render itself."""

    @abstractmethod
    def to_html(self, ctx: Context) -> str:
        ...


@dataclass(frozen=True)
class RenderOptions:
    """Page-level rendering options.

    Attributes:
        stylesheet: Internal path of the stylesheet linked from every page;
            None or empty to omit the link.
        include_toc: Render a table of contents for pages with sections.
        lang: Value of the `lang` attribute of the document.
    """

    stylesheet: str | None = SITEMARK_STYLESHEET or None
    include_toc: bool = SITEMARK_INCLUDE_TOC
    lang: str = "en"


@singledispatch
def render(value: Any, ctx: Context) -> str:
    """Render `value` to an HTML fragment.

    Strings are escaped, sequences concatenate the renderings of their items,
    None renders as nothing, and syntax tree nodes and `Renderable` values
    render themselves.
    """
    raise TypeError(f"cannot render value of type {type(value).__name__}")


@render.register
def _(value: str, ctx: Context) -> str:
    return escape_html(value)


@render.register(list)
@render.register(tuple)
def _(value, ctx: Context) -> str:
    return "".join(render(item, ctx) for item in value)


@render.register(type(None))
def _(value: None, ctx: Context) -> str:
    return ""


@render.register
def _(value: Renderable, ctx: Context) -> str:
    return value.to_html(ctx)


@render.register
def _(value: Slot, ctx: Context) -> str:
    raise SlotResolutionError(f"slot `{value.expression}` was not resolved before rendering")


@render.register
def _(value: Text, ctx: Context) -> str:
    return escape_html(value.literal)


@render.register
def _(value: Location, ctx: Context) -> str:
    return f'<a href="{escape_html(ctx.href(value))}">{escape_html(value.literal)}</a>'


@render.register
def _(value: Bold, ctx: Context) -> str:
    return f"<b>{render(value.content, ctx)}</b>"


@render.register
def _(value: Italic, ctx: Context) -> str:
    return f"<i>{render(value.content, ctx)}</i>"


@render.register
def _(value: Preformatted, ctx: Context) -> str:
    return f"<code>{render(value.content, ctx)}</code>"


@render.register
def _(value: Link, ctx: Context) -> str:
    return f'<a href="{escape_html(ctx.href(value.location))}">{render(value.target, ctx)}</a>'


@render.register
def _(value: Paragraph, ctx: Context) -> str:
    return f"<p>{render(value.content, ctx)}</p>"


@render.register
def _(value: Image, ctx: Context) -> str:
    if isinstance(value.alt, Slot):
        raise SlotResolutionError(f"slot `{value.alt.expression}` was not resolved before rendering")
    src = flatten_text(value.link, ctx)
    return f'<img src="{escape_html(src)}" alt="{escape_html(value.alt)}">'


@render.register
def _(value: Section, ctx: Context) -> str:
    return _render_section(value, ctx, depth=0)


@render.register
def _(value: Page, ctx: Context) -> str:
    return render_page(value, ctx)


def flatten_text(terms: list[InlineTerm], ctx: Context | None = None) -> str:
    """Plain text of inline terms, without markup and unescaped.

    With a context, locations contribute their resolved href (used for image
    sources); without one they contribute their literal and links their target.
    """
    parts: list[str] = []
    for term in terms:
        if isinstance(term, Text):
            parts.append(term.literal)
        elif isinstance(term, Location):
            parts.append(ctx.href(term) if ctx else term.literal)
        elif isinstance(term, Link):
            parts.append(ctx.href(term.location) if ctx else flatten_text(term.target))
        else:
            parts.append(flatten_text(term.content, ctx))
    return "".join(parts)


def _render_section(section: Section, ctx: Context, depth: int) -> str:
    level = min(depth + 2, _MAX_HEADING_LEVEL)
    anchor = escape_html(section.id)
    parts = [
        f'<section class="section" id="{anchor}">',
        f'<h{level} class="section-title">{render(section.title, ctx)}'
        f' <a class="anchor" href="#{anchor}">#</a></h{level}>',
    ]
    if section.body:
        parts.append(f'<div class="section-body">{render(section.body, ctx)}</div>')
    for child in section.children:
        parts.append(_render_section(child, ctx, depth + 1))
    parts.append("</section>")
    return "\n".join(parts)


def render_toc(sections: list[Section]) -> str:
    """Nested list of links to the sections of a page."""
    if not sections:
        return ""
    items = []
    for section in sections:
        title = escape_html(flatten_text(section.title))
        link = f'<a href="#{escape_html(section.id)}">{title}</a>'
        items.append(f"<li>{link}{render_toc(section.children)}</li>")
    return "<ul>" + "".join(items) + "</ul>"


def render_page(page: Page, ctx: Context, options: RenderOptions | None = None) -> str:
    """Render a complete HTML document for `page` located at `ctx.location`."""
    opts = options or RenderOptions()
    title = escape_html(page.title)

    head = ['<meta charset="utf-8">', f"<title>{title}</title>"]
    if opts.stylesheet:
        stylesheet = ctx.href(InternalLocation(literal=opts.stylesheet))
        head.append(f'<link rel="stylesheet" href="{escape_html(stylesheet)}">')

    body = [f'<h1 class="page-title">{title}</h1>']
    if opts.include_toc and page.children:
        body.append(f'<nav class="toc">{render_toc(page.children)}</nav>')
    body.append(f'<div class="page-body">{render(page.body, ctx)}</div>')
    body.extend(_render_section(section, ctx, depth=0) for section in page.children)

    return "\n".join(
        [
            "<!DOCTYPE html>",
            f'<html lang="{escape_html(opts.lang)}">',
            "<head>",
            *head,
            "</head>",
            "<body>",
            '<main class="page">',
            *body,
            "</main>",
            "</body>",
            "</html>",
            "",
        ]
    )
