"""Resolve host-expression slots to values supplied by the embedding program."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterator

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
    UrlLocation,
    iter_nodes,
)
from sitemark.site import InternalPath

Resolver = Callable[[str], Any]


class MappingResolver:
    """Resolve slot expressions by name lookup in a mapping.

    Dotted expressions walk nested mappings and attributes, so `$[site.logo]`
    reads `mapping["site"]["logo"]` (or `mapping["site"].logo`).
    """

    def __init__(self, values: Mapping[str, Any]) -> None:
        self.values = values

    def __call__(self, expression: str) -> Any:
        head, *rest = expression.strip().split(".")
        if head not in self.values:
            raise SlotResolutionError(f"unknown slot `{expression}`")
        value = self.values[head]
        for part in rest:
            if isinstance(value, Mapping) and part in value:
                value = value[part]
            elif hasattr(value, part):
                value = getattr(value, part)
            else:
                raise SlotResolutionError(f"unknown slot `{expression}`: no `{part}`")
        return value


def location_from_string(value: str) -> Location:
    """Interpret a string as a location: `/path`, `#anchor`, or a URL."""
    if not value:
        raise SlotResolutionError("empty location")
    if value.startswith("/"):
        return _checked_internal(InternalLocation(literal=value[1:]))
    if value.startswith("#"):
        return AnchorLocation(literal=value[1:])
    return UrlLocation(literal=value)


def _checked_internal(location: InternalLocation) -> InternalLocation:
    path, _, _anchor = location.literal.partition("#")
    try:
        InternalPath.parse(path)
    except ValueError as exc:
        raise SlotResolutionError(f"invalid internal path {location.literal!r}: {exc}") from exc
    return location


def iter_slots(node: Page | Section) -> Iterator[Slot]:
    """Yield the unresolved slots below `node` in document order."""
    for child in iter_nodes(node):
        if isinstance(child, Slot):
            yield child


def resolve_slots(page: Page, resolver: Resolver) -> Page:
    """Return a copy of `page` with every slot replaced by its resolved value.

    Raises:
        SlotResolutionError: If the resolver fails or returns a value of the
            wrong kind.
    """
    return _SlotResolver(resolver).page(page)


class _SlotResolver:
    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver

    def evaluate(self, slot: Slot) -> Any:
        try:
            return self.resolver(slot.expression)
        except SlotResolutionError:
            raise
        except Exception as exc:
            raise SlotResolutionError(f"cannot resolve slot `{slot.expression}`: {exc}") from exc

    def location(self, slot: Slot) -> Location:
        value = self.evaluate(slot)
        if isinstance(value, InternalLocation):
            return _checked_internal(value)
        if isinstance(value, Location):
            return value
        if isinstance(value, str):
            return location_from_string(value)
        raise SlotResolutionError(
            f"slot `{slot.expression}` must resolve to a location or string, got {type(value).__name__}"
        )

    def text(self, slot: Slot) -> str:
        value = self.evaluate(slot)
        if value is None:
            raise SlotResolutionError(f"slot `{slot.expression}` resolved to None")
        return str(value)

    def terms(self, terms: list[InlineTerm]) -> list[InlineTerm]:
        return [self.term(term) for term in terms]

    def term(self, term: InlineTerm) -> InlineTerm:
        if isinstance(term, (Bold, Italic, Preformatted)):
            return term.model_copy(update={"content": self.terms(term.content)})
        if isinstance(term, Link):
            location = term.location
            if isinstance(location, Slot):
                location = self.location(location)
            return term.model_copy(update={"target": self.terms(term.target), "location": location})
        return term

    def block(self, block: Paragraph | Image) -> Paragraph | Image:
        if isinstance(block, Image):
            alt = self.text(block.alt) if isinstance(block.alt, Slot) else block.alt
            return block.model_copy(update={"alt": alt, "link": self.terms(block.link)})
        return block.model_copy(update={"content": self.terms(block.content)})

    def section(self, section: Section) -> Section:
        return section.model_copy(
            update={
                "title": self.terms(section.title),
                "body": [self.block(block) for block in section.body],
                "children": [self.section(child) for child in section.children],
            }
        )

    def page(self, page: Page) -> Page:
        return page.model_copy(
            update={
                "body": [self.block(block) for block in page.body],
                "children": [self.section(child) for child in page.children],
            }
        )
