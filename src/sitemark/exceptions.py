"""Custom exceptions for sitemark."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sitemark.lexer import Position


class SitemarkError(Exception):
    """Base exception for sitemark operations."""


class ParseError(SitemarkError):
    """Error while parsing markup.

    Attributes:
        reason: Human readable description without position information.
        position: Where the offending token starts, if known.
        expected: Legal continuations at that point (may be empty).
        filename: Source file name, if the text came from a file.
    """

    def __init__(
        self,
        reason: str,
        position: Position | None = None,
        *,
        expected: tuple[str, ...] = (),
        filename: str | None = None,
    ) -> None:
        self.reason = reason
        self.position = position
        self.expected = expected
        self.filename = filename
        super().__init__(self._format())

    def _format(self) -> str:
        if self.position is None:
            where = ""
        else:
            where = f" at line {self.position.line}, column {self.position.column}"
        if self.filename:
            where = f" in '{self.filename}'" + where
        return self.reason + where

    def with_filename(self, filename: str) -> ParseError:
        """Return a copy of this error tagged with a source file name."""
        return ParseError(
            self.reason, self.position, expected=self.expected, filename=filename
        )


class TreeError(SitemarkError):
    """Invalid operation on the document tree (a programming error)."""


class RootInsertionError(TreeError):
    """A node was inserted at the root path."""


class OccupiedPathError(TreeError):
    """A node was inserted at a path that already holds a node."""


class PageInPathError(TreeError):
    """A path walks through a page, which cannot hold children."""


class SlotResolutionError(SitemarkError):
    """A host-expression slot could not be resolved to a usable value."""


class GenerationError(SitemarkError):
    """I/O failure while writing the generated site."""

    def __init__(self, operation: str, path: Path, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.path = path
        message = f"{operation} failed for {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
