"""Syntax tree models for parsed markup documents."""

from __future__ import annotations

from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AstNode(BaseModel):
    """Base class of every syntax tree node. Nodes are immutable."""

    model_config = ConfigDict(frozen=True)


class Slot(AstNode):
    """A value supplied by the embedding program instead of literal markup.

    `expression` is the raw, unevaluated source text between `$[` and `]`.
    """

    kind: Literal["slot"] = "slot"
    expression: str


class Text(AstNode):
    kind: Literal["text"] = "text"
    literal: str


class Location(AstNode):
    """Common base of the location forms."""

    literal: str


class InternalLocation(Location):
    """Reference to a page of the site by its tree path, e.g. `/"physics/gravity"`."""

    kind: Literal["internal"] = "internal"


class UrlLocation(Location):
    """External absolute link, e.g. `@"https://example.org"`."""

    kind: Literal["url"] = "url"


class AnchorLocation(Location):
    """Anchor inside the current page, e.g. `#"history"`."""

    kind: Literal["anchor"] = "anchor"


class Bold(AstNode):
    kind: Literal["bold"] = "bold"
    content: list[InlineTerm] = Field(default_factory=list)


class Italic(AstNode):
    kind: Literal["italic"] = "italic"
    content: list[InlineTerm] = Field(default_factory=list)


class Preformatted(AstNode):
    kind: Literal["preformatted"] = "preformatted"
    content: list[InlineTerm] = Field(default_factory=list)


class Link(AstNode):
    kind: Literal["link"] = "link"
    target: list[InlineTerm] = Field(default_factory=list)
    location: LocationOrSlot


class Paragraph(AstNode):
    kind: Literal["paragraph"] = "paragraph"
    content: list[InlineTerm] = Field(default_factory=list)


class Image(AstNode):
    """An image block; `link` is the inline content naming the image source."""

    kind: Literal["image"] = "image"
    alt: Union[str, Slot]
    link: list[InlineTerm] = Field(default_factory=list)


class Section(AstNode):
    """A nested document. `id` doubles as the HTML anchor of the section."""

    kind: Literal["section"] = "section"
    id: str
    title: list[InlineTerm] = Field(default_factory=list)
    body: list[BlockingComponent] = Field(default_factory=list)
    children: list[Section] = Field(default_factory=list)


class Page(AstNode):
    """A root document, the unit stored in the document tree."""

    kind: Literal["page"] = "page"
    title: str
    body: list[BlockingComponent] = Field(default_factory=list)
    children: list[Section] = Field(default_factory=list)


InlineTerm = Annotated[
    Union[Text, InternalLocation, UrlLocation, AnchorLocation, Bold, Italic, Preformatted, Link],
    Field(discriminator="kind"),
]
LocationOrSlot = Annotated[
    Union[InternalLocation, UrlLocation, AnchorLocation, Slot],
    Field(discriminator="kind"),
]
BlockingComponent = Annotated[Union[Paragraph, Image], Field(discriminator="kind")]

for _model in (Bold, Italic, Preformatted, Link, Paragraph, Image, Section, Page):
    _model.model_rebuild()


def iter_nodes(node: AstNode) -> Iterator[AstNode]:
    """Yield `node` and every node below it, depth first in document order."""
    yield node
    for name in type(node).model_fields:
        value = getattr(node, name)
        if isinstance(value, AstNode):
            yield from iter_nodes(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, AstNode):
                    yield from iter_nodes(item)
