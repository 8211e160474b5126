"""Token cursor with non-destructive lookahead."""

from __future__ import annotations

from sitemark.exceptions import ParseError
from sitemark.lexer import Token, TokenKind, tokenize

DELIMITERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(DELIMITERS.values())


class TokenCursor:
    """A position in a token list, bounded by an end index.

    `peek*` methods never move the cursor. A cursor returned by `group()`
    covers only the tokens inside a delimiter pair and reports end of input
    where the closing delimiter sits.
    """

    def __init__(self, tokens: list[Token], start: int = 0, end: int | None = None) -> None:
        self._tokens = tokens
        self._index = start
        self._end = len(tokens) - 1 if end is None else end

    @classmethod
    def from_text(cls, text: str) -> TokenCursor:
        return cls(tokenize(text))

    def current(self) -> Token:
        return self.lookahead(0)

    def lookahead(self, offset: int = 0) -> Token:
        index = self._index + offset
        if index < self._end:
            return self._tokens[index]
        boundary = self._tokens[self._end]
        return Token(TokenKind.EOF, "", boundary.position, boundary.position.offset)

    def is_empty(self) -> bool:
        return self._index >= self._end

    def peek(self, kind: TokenKind, value: str | None = None, offset: int = 0) -> bool:
        token = self.lookahead(offset)
        return token.kind is kind and (value is None or token.value == value)

    def peek_ident(self, name: str | None = None) -> bool:
        return self.peek(TokenKind.IDENT, name)

    def peek_punct(self, mark: str) -> bool:
        return self.peek(TokenKind.PUNCT, mark)

    def peek_string(self) -> bool:
        return self.peek(TokenKind.STRING)

    def peek_slot(self) -> bool:
        return self.peek(TokenKind.SLOT)

    def next(self) -> Token:
        token = self.current()
        if token.kind is TokenKind.EOF:
            raise self.error("unexpected end of input")
        self._index += 1
        return token

    def expect(self, kind: TokenKind, value: str | None = None, description: str | None = None) -> Token:
        if self.peek(kind, value):
            return self.next()
        wanted = description or (f"`{value}`" if value is not None else kind.value)
        raise self.error(f"expected {wanted}, found {self.current().describe()}", expected=(wanted,))

    def expect_punct(self, mark: str) -> Token:
        return self.expect(TokenKind.PUNCT, mark)

    def expect_ident(self, name: str | None = None) -> Token:
        return self.expect(TokenKind.IDENT, name)

    def expect_string(self) -> str:
        return self.expect(TokenKind.STRING).value

    def expect_end(self) -> None:
        if not self.is_empty():
            raise self.error(
                f"unexpected {self.current().describe()}, expected end of input",
                expected=("end of input",),
            )

    def group(self, open_mark: str) -> TokenCursor:
        """Consume a balanced delimiter pair and return a cursor over its contents."""
        opening = self.expect_punct(open_mark)
        start = self._index
        stack = [DELIMITERS[open_mark]]
        index = start
        while index < self._end:
            token = self._tokens[index]
            if token.kind is TokenKind.PUNCT:
                if token.value in DELIMITERS:
                    stack.append(DELIMITERS[token.value])
                elif token.value in _CLOSERS:
                    closer = stack.pop()
                    if token.value != closer:
                        raise ParseError(
                            f"mismatched delimiter: expected `{closer}`, found `{token.value}`",
                            token.position,
                            expected=(f"`{closer}`",),
                        )
                    if not stack:
                        self._index = index + 1
                        return TokenCursor(self._tokens, start, index)
            index += 1
        raise ParseError(f"unclosed delimiter `{open_mark}`", opening.position)

    def error(self, reason: str, expected: tuple[str, ...] = ()) -> ParseError:
        return ParseError(reason, self.current().position, expected=expected)
