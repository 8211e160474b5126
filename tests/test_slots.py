"""Tests for host-expression slot resolution."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from sitemark.exceptions import SlotResolutionError
from sitemark.parser import parse_page
from sitemark.schemas import AnchorLocation, InternalLocation, Link, Page, UrlLocation
from sitemark.slots import MappingResolver, iter_slots, location_from_string, resolve_slots

SLOTTED_PAGE = """
title: "Home",
body: p "Visit " l "our shop" $[links.shop] ;
      img $[captions.logo] @"https://example.org/logo.png",
children: {
    { id: "contact", title: "Contact", body: p l "mail" $[ links.mail ] }
}
"""


class TestMappingResolver:
    """Tests for MappingResolver lookups."""

    def test_plain_name(self) -> None:
        assert MappingResolver({"name": "value"})("name") == "value"

    def test_dotted_lookup_through_mappings_and_attributes(self) -> None:
        resolver = MappingResolver({"site": {"owner": SimpleNamespace(email="me@example.org")}})
        assert resolver("site.owner.email") == "me@example.org"

    def test_unknown_name(self) -> None:
        with pytest.raises(SlotResolutionError, match="unknown slot `missing`"):
            MappingResolver({})("missing")

    def test_unknown_attribute(self) -> None:
        with pytest.raises(SlotResolutionError, match="no `nope`"):
            MappingResolver({"site": {}})("site.nope")


class TestLocationFromString:
    """Tests for location_from_string function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("/physics/gravity", InternalLocation(literal="physics/gravity")),
            ("#history", AnchorLocation(literal="history")),
            ("https://example.org", UrlLocation(literal="https://example.org")),
            ("mailto:me@example.org", UrlLocation(literal="mailto:me@example.org")),
        ],
    )
    def test_prefix_selects_form(self, value: str, expected: object) -> None:
        assert location_from_string(value) == expected

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(SlotResolutionError):
            location_from_string("")

    @pytest.mark.parametrize("value", ["/../y", "/a/./b", "/..#top"])
    def test_invalid_internal_path_is_rejected(self, value: str) -> None:
        """Dot segments cannot name a page."""
        with pytest.raises(SlotResolutionError, match="invalid internal path"):
            location_from_string(value)


class TestResolveSlots:
    """Tests for resolve_slots function."""

    def test_slots_are_listed_in_document_order(self) -> None:
        page = parse_page(SLOTTED_PAGE)
        assert [slot.expression for slot in iter_slots(page)] == ["links.shop", "captions.logo", "links.mail"]

    def test_every_slot_is_replaced(self) -> None:
        """Resolved pages hold no slots and keep everything else."""
        page = parse_page(SLOTTED_PAGE)
        resolver = MappingResolver(
            {
                "links": {"shop": "/shop/index", "mail": UrlLocation(literal="mailto:me@example.org")},
                "captions": {"logo": 42},
            }
        )
        resolved = resolve_slots(page, resolver)

        assert list(iter_slots(resolved)) == []
        link, image = resolved.body[0].content[1], resolved.body[1]
        assert isinstance(link, Link)
        assert link.location == InternalLocation(literal="shop/index")
        assert image.alt == "42"
        assert image.link == [UrlLocation(literal="https://example.org/logo.png")]
        assert resolved.children[0].body[0].content[0].location == UrlLocation(literal="mailto:me@example.org")

    def test_input_page_is_untouched(self) -> None:
        page = parse_page(SLOTTED_PAGE)
        resolve_slots(page, lambda expression: "#top")
        assert len(list(iter_slots(page))) == 3

    def test_resolver_errors_are_wrapped(self) -> None:
        """Any resolver failure surfaces as SlotResolutionError."""

        def broken(expression: str) -> str:
            raise KeyError(expression)

        with pytest.raises(SlotResolutionError, match="cannot resolve slot `links.shop`") as exc_info:
            resolve_slots(parse_page(SLOTTED_PAGE), broken)
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_location_of_wrong_type(self) -> None:
        with pytest.raises(SlotResolutionError, match="must resolve to a location or string"):
            resolve_slots(parse_page(SLOTTED_PAGE), lambda expression: 3)

    def test_resolved_internal_location_is_validated(self) -> None:
        """Location values from the resolver are checked like parsed ones."""
        with pytest.raises(SlotResolutionError, match="invalid internal path"):
            resolve_slots(parse_page(SLOTTED_PAGE), lambda expression: InternalLocation(literal="a/../b"))

    def test_alt_text_must_not_be_none(self) -> None:
        values = {"links.shop": "#a", "captions.logo": None, "links.mail": "#b"}
        with pytest.raises(SlotResolutionError, match="resolved to None"):
            resolve_slots(parse_page(SLOTTED_PAGE), values.__getitem__)

    def test_page_without_slots_is_unchanged(self, encyclopedia_page: Page) -> None:
        assert resolve_slots(encyclopedia_page, MappingResolver({})) == encyclopedia_page
