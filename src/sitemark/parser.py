"""Recursive descent parser for sitemark markup.

Every form exposes a non-consuming peek predicate and a parse function. At a
choice point the alternatives are peeked in order and the first that matches
is parsed for real; when none matches a `ParseError` lists the legal
continuations. Keyword-led forms peek an identifier and punctuation-led forms
peek their leading mark, so no two alternatives match the same token.

Grammar summary::

    Page       := "{" PageFields "}" | PageFields
    Section    := "{" fields "}"        (id, title, body, children)
    Children   := "{" (Section ","?)* "}"
    Body       := (Blocking (";" Blocking)* ";"?)?
    Blocking   := "p" Inline | "img" (STRING | Slot) Inline
    Inline     := (Term | "(" Inline ")")*
    Term       := STRING | Location | "b" Inline | "i" Inline | "c" Inline
                | "l" (STRING | "(" Inline ")") (Location | Slot)
                  (a link target is a single string or a parenthesized group;
                  keyword terms are greedy and would take the location too)
    Location   := "/" STRING | "@" STRING | "#" STRING
    Slot       := "$" "[" <raw payload> "]"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from sitemark.cursor import TokenCursor
from sitemark.exceptions import ParseError
from sitemark.lexer import TokenKind
from sitemark.schemas import (
    AnchorLocation,
    BlockingComponent,
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

PARAGRAPH_KEYWORD = "p"
IMAGE_KEYWORD = "img"
BOLD_KEYWORD = "b"
ITALIC_KEYWORD = "i"
PREFORMATTED_KEYWORD = "c"
LINK_KEYWORD = "l"

INTERNAL_MARK = "/"
URL_MARK = "@"
ANCHOR_MARK = "#"


@dataclass(frozen=True)
class Alternative:
    """One branch of a choice point."""

    description: str
    peek: Callable[[TokenCursor], bool]
    parse: Callable[[TokenCursor], Any]


def _keyword(word: str) -> Callable[[TokenCursor], bool]:
    return lambda cursor: cursor.peek_ident(word)


def _mark(mark: str) -> Callable[[TokenCursor], bool]:
    return lambda cursor: cursor.peek_punct(mark)


def _describe(alternatives: Sequence[Alternative]) -> tuple[str, ...]:
    return tuple(alternative.description for alternative in alternatives)


def choose(cursor: TokenCursor, alternatives: Sequence[Alternative]) -> Any:
    """Parse the first alternative whose peek matches, or fail listing all of them."""
    for alternative in alternatives:
        if alternative.peek(cursor):
            return alternative.parse(cursor)
    expected = _describe(alternatives)
    raise cursor.error(
        f"expected one of {', '.join(expected)}, found {cursor.current().describe()}",
        expected=expected,
    )


def peek_any(cursor: TokenCursor, alternatives: Sequence[Alternative]) -> bool:
    return any(alternative.peek(cursor) for alternative in alternatives)


def _finish_group(cursor: TokenCursor, alternatives: Sequence[Alternative], closer: str) -> None:
    """Fail unless a delimited group was fully consumed."""
    if cursor.is_empty():
        return
    expected = _describe(alternatives) + (f"`{closer}`",)
    raise cursor.error(
        f"expected one of {', '.join(expected)}, found {cursor.current().describe()}",
        expected=expected,
    )


def _parse_internal(cursor: TokenCursor) -> InternalLocation:
    cursor.expect_punct(INTERNAL_MARK)
    token = cursor.expect(TokenKind.STRING)
    path, _, _anchor = token.value.partition("#")
    try:
        InternalPath.parse(path)
    except ValueError as exc:
        raise ParseError(f"invalid internal path: {exc}", token.position) from exc
    return InternalLocation(literal=token.value)


def _parse_url(cursor: TokenCursor) -> UrlLocation:
    cursor.expect_punct(URL_MARK)
    return UrlLocation(literal=cursor.expect_string())


def _parse_anchor(cursor: TokenCursor) -> AnchorLocation:
    cursor.expect_punct(ANCHOR_MARK)
    return AnchorLocation(literal=cursor.expect_string())


def _parse_slot(cursor: TokenCursor) -> Slot:
    return Slot(expression=cursor.expect(TokenKind.SLOT).value)


LOCATION_ALTERNATIVES = (
    Alternative("`/`", _mark(INTERNAL_MARK), _parse_internal),
    Alternative("`@`", _mark(URL_MARK), _parse_url),
    Alternative("`#`", _mark(ANCHOR_MARK), _parse_anchor),
)
SLOT_ALTERNATIVE = Alternative("`$[`", lambda cursor: cursor.peek_slot(), _parse_slot)


def parse_location_at(cursor: TokenCursor) -> Location:
    return choose(cursor, LOCATION_ALTERNATIVES)


def _parse_text(cursor: TokenCursor) -> Text:
    return Text(literal=cursor.expect_string())


def _parse_bold(cursor: TokenCursor) -> Bold:
    cursor.expect_ident(BOLD_KEYWORD)
    return Bold(content=parse_inline_at(cursor))


def _parse_italic(cursor: TokenCursor) -> Italic:
    cursor.expect_ident(ITALIC_KEYWORD)
    return Italic(content=parse_inline_at(cursor))


def _parse_preformatted(cursor: TokenCursor) -> Preformatted:
    cursor.expect_ident(PREFORMATTED_KEYWORD)
    return Preformatted(content=parse_inline_at(cursor))


def _parse_link(cursor: TokenCursor) -> Link:
    cursor.expect_ident(LINK_KEYWORD)
    # The target is a single string or a parenthesized group: a free-running
    # inline component would swallow the location, which is itself a term.
    target = choose(cursor, _LINK_TARGET_ALTERNATIVES)
    location = choose(cursor, LOCATION_ALTERNATIVES + (SLOT_ALTERNATIVE,))
    return Link(target=target, location=location)


INLINE_TERM_ALTERNATIVES = (
    Alternative("string literal", lambda cursor: cursor.peek_string(), _parse_text),
    *LOCATION_ALTERNATIVES,
    Alternative(f"`{BOLD_KEYWORD}`", _keyword(BOLD_KEYWORD), _parse_bold),
    Alternative(f"`{ITALIC_KEYWORD}`", _keyword(ITALIC_KEYWORD), _parse_italic),
    Alternative(f"`{PREFORMATTED_KEYWORD}`", _keyword(PREFORMATTED_KEYWORD), _parse_preformatted),
    Alternative(f"`{LINK_KEYWORD}`", _keyword(LINK_KEYWORD), _parse_link),
)


def _parse_inline_group(cursor: TokenCursor) -> list[InlineTerm]:
    inner = cursor.group("(")
    terms = parse_inline_at(inner)
    _finish_group(inner, _INLINE_ALTERNATIVES, ")")
    return terms


_INLINE_ALTERNATIVES = INLINE_TERM_ALTERNATIVES + (
    Alternative("`(`", _mark("("), _parse_inline_group),
)
_LINK_TARGET_ALTERNATIVES = (
    Alternative("string literal", lambda cursor: cursor.peek_string(), lambda cursor: [_parse_text(cursor)]),
    Alternative("`(`", _mark("("), _parse_inline_group),
)


def parse_inline_at(cursor: TokenCursor) -> list[InlineTerm]:
    """Parse terms until neither a term nor a group can start.

    Parenthesized groups are spliced into the result, so grouping never shows
    up in the tree.
    """
    terms: list[InlineTerm] = []
    while True:
        if cursor.peek_punct("("):
            terms.extend(_parse_inline_group(cursor))
        elif peek_any(cursor, INLINE_TERM_ALTERNATIVES):
            terms.append(choose(cursor, INLINE_TERM_ALTERNATIVES))
        else:
            return terms


def _parse_paragraph(cursor: TokenCursor) -> Paragraph:
    cursor.expect_ident(PARAGRAPH_KEYWORD)
    return Paragraph(content=parse_inline_at(cursor))


def _parse_image(cursor: TokenCursor) -> Image:
    cursor.expect_ident(IMAGE_KEYWORD)
    alt = choose(cursor, _IMAGE_ALT_ALTERNATIVES)
    return Image(alt=alt, link=parse_inline_at(cursor))


_IMAGE_ALT_ALTERNATIVES = (
    Alternative("string literal", lambda cursor: cursor.peek_string(), lambda cursor: cursor.expect_string()),
    SLOT_ALTERNATIVE,
)
BLOCKING_ALTERNATIVES = (
    Alternative(f"`{PARAGRAPH_KEYWORD}`", _keyword(PARAGRAPH_KEYWORD), _parse_paragraph),
    Alternative(f"`{IMAGE_KEYWORD}`", _keyword(IMAGE_KEYWORD), _parse_image),
)


def parse_body_at(cursor: TokenCursor) -> list[BlockingComponent]:
    """Parse `;`-separated blocking components; a trailing `;` is allowed."""
    components: list[BlockingComponent] = []
    if not peek_any(cursor, BLOCKING_ALTERNATIVES):
        return components
    components.append(choose(cursor, BLOCKING_ALTERNATIVES))
    while cursor.peek_punct(";"):
        cursor.next()
        if not peek_any(cursor, BLOCKING_ALTERNATIVES):
            break
        components.append(choose(cursor, BLOCKING_ALTERNATIVES))
    return components


@dataclass(frozen=True)
class FieldSpec:
    name: str
    parse: Callable[[TokenCursor], Any]
    required: bool = True


def parse_record(cursor: TokenCursor, record: str, fields: Sequence[FieldSpec]) -> dict[str, Any]:
    """Parse `name: value` pairs in any order until the cursor is exhausted.

    Raises:
        ParseError: On unknown, repeated or missing fields.
    """
    specs = {spec.name: spec for spec in fields}
    names = tuple(f"`{spec.name}`" for spec in fields)
    values: dict[str, Any] = {}

    while not cursor.is_empty():
        key = cursor.current()
        if key.kind is not TokenKind.IDENT or key.value not in specs:
            raise cursor.error(
                f"unexpected {key.describe()} in {record}, expected one of {', '.join(names)}",
                expected=names,
            )
        cursor.next()
        if key.value in values:
            raise ParseError(f"{key.value} already declared in {record}", key.position)
        cursor.expect_punct(":")
        values[key.value] = specs[key.value].parse(cursor)
        if cursor.peek_punct(","):
            cursor.next()

    for spec in fields:
        if spec.required and spec.name not in values:
            raise cursor.error(f"missing {spec.name} field in {record}")
    return values


def _parse_children(cursor: TokenCursor) -> list[Section]:
    inner = cursor.group("{")
    sections: list[Section] = []
    while not inner.is_empty():
        if not inner.peek_punct("{"):
            raise inner.error(
                f"expected `{{` to open a section, found {inner.current().describe()}",
                expected=("`{`",),
            )
        sections.append(parse_section_fields(inner.group("{")))
        if inner.peek_punct(","):
            inner.next()
    return sections


_SECTION_FIELDS = (
    FieldSpec("id", lambda cursor: cursor.expect_string()),
    FieldSpec("title", parse_inline_at),
    FieldSpec("body", parse_body_at),
    FieldSpec("children", _parse_children, required=False),
)
_PAGE_FIELDS = (
    FieldSpec("title", lambda cursor: cursor.expect_string()),
    FieldSpec("body", parse_body_at),
    FieldSpec("children", _parse_children, required=False),
)


def parse_section_fields(cursor: TokenCursor) -> Section:
    values = parse_record(cursor, "section", _SECTION_FIELDS)
    return Section(**values)


def parse_page_fields(cursor: TokenCursor) -> Page:
    values = parse_record(cursor, "page", _PAGE_FIELDS)
    return Page(**values)


def _parse_text_with(
    text: str,
    parse: Callable[[TokenCursor], Any],
    *,
    braced: bool = False,
    filename: str | None = None,
) -> Any:
    try:
        cursor = TokenCursor.from_text(text)
        if braced and cursor.peek_punct("{"):
            inner = cursor.group("{")
            cursor.expect_end()
            return parse(inner)
        result = parse(cursor)
        cursor.expect_end()
        return result
    except ParseError as exc:
        if filename is None:
            raise
        raise exc.with_filename(filename) from None


def parse_page(text: str, *, filename: str | None = None) -> Page:
    """Parse one page. The fields may be wrapped in braces.

    Raises:
        ParseError: With the position of the first offending token.
    """
    return _parse_text_with(text, parse_page_fields, braced=True, filename=filename)


def parse_section(text: str) -> Section:
    return _parse_text_with(text, parse_section_fields, braced=True)


def parse_body(text: str) -> list[BlockingComponent]:
    return _parse_text_with(text, parse_body_at)


def parse_inline(text: str) -> list[InlineTerm]:
    return _parse_text_with(text, parse_inline_at)


def parse_location(text: str) -> Location:
    return _parse_text_with(text, parse_location_at)
