"""Shared schemas for sitemark."""

from sitemark.schemas.ast import (
    AnchorLocation,
    AstNode,
    BlockingComponent,
    Bold,
    Image,
    InlineTerm,
    InternalLocation,
    Italic,
    Link,
    Location,
    LocationOrSlot,
    Page,
    Paragraph,
    Preformatted,
    Section,
    Slot,
    Text,
    UrlLocation,
    iter_nodes,
)

__all__ = [
    "AnchorLocation",
    "AstNode",
    "BlockingComponent",
    "Bold",
    "Image",
    "InlineTerm",
    "InternalLocation",
    "Italic",
    "Link",
    "Location",
    "LocationOrSlot",
    "Page",
    "Paragraph",
    "Preformatted",
    "Section",
    "Slot",
    "Text",
    "UrlLocation",
    "iter_nodes",
]
