"""Split markup source text into tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sitemark.exceptions import ParseError

PUNCTUATION = frozenset(":;,(){}[]/@#")

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
}


class TokenKind(Enum):
    IDENT = "identifier"
    STRING = "string literal"
    PUNCT = "punctuation"
    SLOT = "slot"
    EOF = "end of input"


@dataclass(frozen=True)
class Position:
    """Location of a character in the source text (1-based line and column)."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True)
class Token:
    """A lexed token.

    For strings, `value` holds the decoded literal and for slots the raw
    payload. `end` is the source offset just past the token.
    """

    kind: TokenKind
    value: str
    position: Position
    end: int

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.STRING:
            return "string literal"
        if self.kind is TokenKind.SLOT:
            return "slot"
        return f"`{self.value}`"


def tokenize(text: str) -> list[Token]:
    """Tokenize `text`. The returned list always ends with an EOF token.

    Raises:
        ParseError: On unterminated strings, unknown escapes or characters
            that cannot start a token.
    """
    return _Lexer(text).run()


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def position(self) -> Position:
        return Position(self.line, self.pos - self.line_start + 1, self.pos)

    def advance(self) -> str:
        char = self.text[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.line_start = self.pos
        return char

    def run(self) -> list[Token]:
        tokens: list[Token] = []
        text = self.text
        while True:
            self._skip_trivia()
            start = self.position()
            if self.pos >= len(text):
                tokens.append(Token(TokenKind.EOF, "", start, self.pos))
                return tokens

            char = text[self.pos]
            if char == '"':
                value = self._read_string(start)
                tokens.append(Token(TokenKind.STRING, value, start, self.pos))
            elif char.isalpha() or char == "_":
                while self.pos < len(text) and (text[self.pos].isalnum() or text[self.pos] == "_"):
                    self.advance()
                tokens.append(Token(TokenKind.IDENT, text[start.offset : self.pos], start, self.pos))
            elif char in PUNCTUATION:
                self.advance()
                tokens.append(Token(TokenKind.PUNCT, char, start, self.pos))
            elif char == "$":
                payload = self._read_slot(start)
                tokens.append(Token(TokenKind.SLOT, payload, start, self.pos))
            else:
                raise ParseError(f"unexpected character {char!r}", start)

    def _skip_trivia(self) -> None:
        text = self.text
        while self.pos < len(text):
            if text[self.pos].isspace():
                self.advance()
            elif text.startswith("//", self.pos):
                while self.pos < len(text) and text[self.pos] != "\n":
                    self.advance()
            else:
                break

    def _read_string(self, start: Position) -> str:
        text = self.text
        self.advance()  # opening quote
        parts: list[str] = []
        while True:
            if self.pos >= len(text):
                raise ParseError("unterminated string literal", start)
            char_pos = self.position()
            char = self.advance()
            if char == '"':
                return "".join(parts)
            if char != "\\":
                parts.append(char)
                continue

            if self.pos >= len(text):
                raise ParseError("unterminated string literal", start)
            code = self.advance()
            if code in _SIMPLE_ESCAPES:
                parts.append(_SIMPLE_ESCAPES[code])
            elif code == "u":
                parts.append(self._read_unicode_escape(char_pos))
            elif code == "\n":
                # line continuation: drop the newline and the next line's indentation
                while self.pos < len(text) and text[self.pos] in " \t":
                    self.advance()
            else:
                raise ParseError(f"unknown escape sequence '\\{code}'", char_pos)

    def _read_slot(self, start: Position) -> str:
        """Read `$[ ... ]` and return the raw payload between the brackets.

        The payload belongs to the embedding program, so it is not tokenized;
        only bracket nesting and quoted strings are tracked to find its end.
        """
        text = self.text
        self.advance()  # `$`
        while self.pos < len(text) and text[self.pos] in " \t":
            self.advance()
        if self.pos >= len(text) or text[self.pos] != "[":
            raise ParseError("expected `[` after `$`", self.position(), expected=("`[`",))
        self.advance()
        payload_start = self.pos
        depth = 1
        quote = None
        while self.pos < len(text):
            char = self.advance()
            if quote:
                if char == "\\" and self.pos < len(text):
                    self.advance()
                elif char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    payload = text[payload_start : self.pos - 1].strip()
                    if not payload:
                        raise ParseError("empty slot expression", start)
                    return payload
        raise ParseError("unclosed slot expression", start)

    def _read_unicode_escape(self, escape_pos: Position) -> str:
        text = self.text
        if self.pos >= len(text) or text[self.pos] != "{":
            raise ParseError("expected `{` after '\\u'", escape_pos)
        self.advance()
        close = text.find("}", self.pos)
        digits = text[self.pos : close] if close != -1 else ""
        if not digits or len(digits) > 6:
            raise ParseError("invalid unicode escape", escape_pos)
        try:
            code_point = int(digits, 16)
            char = chr(code_point)
        except ValueError as exc:
            raise ParseError("invalid unicode escape", escape_pos) from exc
        if 0xD800 <= code_point <= 0xDFFF:
            raise ParseError("invalid unicode escape: surrogate code point", escape_pos)
        while self.pos <= close:
            self.advance()
        return char
