"""Link and anchor checks over a populated site."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Iterator

from sitemark.schemas import AnchorLocation, InternalLocation, Location, Page, Section, iter_nodes
from sitemark.site import InternalPath, Site


@dataclass(frozen=True)
class BrokenLink:
    """An internal location that does not resolve.

    Attributes:
        page: Path of the page containing the location.
        location: The offending location.
        reason: Why it does not resolve.
    """

    page: InternalPath
    location: Location
    reason: str

    def __str__(self) -> str:
        return f"{self.page}: {self.location.kind} location {self.location.literal!r}: {self.reason}"


def _iter_sections(sections: list[Section]) -> Iterator[Section]:
    for section in sections:
        yield section
        yield from _iter_sections(section.children)


def section_ids(page: Page) -> set[str]:
    """Every section id of `page`, at any depth."""
    return {section.id for section in _iter_sections(page.children)}


def duplicate_section_ids(page: Page) -> list[str]:
    """Section ids used more than once in `page` (anchors must be unique)."""
    counts = Counter(section.id for section in _iter_sections(page.children))
    return sorted(section_id for section_id, count in counts.items() if count > 1)


def find_broken_links(site: Site, assets: Iterable[InternalPath] = ()) -> list[BrokenLink]:
    """Report internal and anchor locations that name no page or section.

    Paths in `assets` (files copied next to the pages) are valid targets too,
    so image sources pointing at them are not reported.
    """
    files = frozenset(assets)
    broken: list[BrokenLink] = []
    for path, page in site.walk():
        own_ids = section_ids(page)
        for node in iter_nodes(page):
            if isinstance(node, AnchorLocation):
                if node.literal not in own_ids:
                    broken.append(BrokenLink(path, node, f"no section with id {node.literal!r}"))
            elif isinstance(node, InternalLocation):
                reason = _check_internal(site, files, node)
                if reason:
                    broken.append(BrokenLink(path, node, reason))
    return broken


def _check_internal(site: Site, files: frozenset[InternalPath], location: InternalLocation) -> str | None:
    target_text, _, anchor = location.literal.partition("#")
    target = InternalPath.parse(target_text)
    if target in files and not anchor:
        return None
    target_page = site.get_page(target)
    if target_page is None:
        return f"no page at /{target}"
    if anchor and anchor not in section_ids(target_page):
        return f"page /{target} has no section with id {anchor!r}"
    return None
