"""The site document tree: directories and pages addressed by path."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from sitemark.exceptions import OccupiedPathError, PageInPathError, RootInsertionError
from sitemark.schemas import Page


@dataclass(frozen=True, order=True)
class Fragment:
    """One non-empty path segment, used as a directory key."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("path fragment must not be empty")
        if "/" in self.name or self.name in {".", ".."}:
            raise ValueError(f"invalid path fragment {self.name!r}")

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class InternalPath:
    """A sequence of fragments naming a node of the tree; the root is empty."""

    fragments: tuple[Fragment, ...] = ()

    @classmethod
    def root(cls) -> InternalPath:
        return cls()

    @classmethod
    def of(cls, *names: str) -> InternalPath:
        return cls(tuple(Fragment(name) for name in names))

    @classmethod
    def parse(cls, text: str) -> InternalPath:
        """Parse `a/b/c`; empty segments (leading, trailing or doubled `/`) are ignored."""
        return cls.of(*(piece for piece in text.split("/") if piece))

    @property
    def is_root(self) -> bool:
        return not self.fragments

    @property
    def parent(self) -> InternalPath:
        if self.is_root:
            raise ValueError("the root path has no parent")
        return InternalPath(self.fragments[:-1])

    @property
    def name(self) -> Fragment:
        if self.is_root:
            raise ValueError("the root path has no name")
        return self.fragments[-1]

    def child(self, fragment: Fragment | str) -> InternalPath:
        if isinstance(fragment, str):
            fragment = Fragment(fragment)
        return InternalPath(self.fragments + (fragment,))

    def to_fs_path(self) -> Path:
        return Path(*(fragment.name for fragment in self.fragments))

    def href_to(self, target: InternalPath) -> str:
        """Relative URL from the page at this path to the node at `target`.

        A page at `a/b/c` is the file `c` inside directory `a/b`, so links are
        computed from that directory.
        """
        base = self.fragments[:-1]
        common = 0
        for mine, theirs in zip(base, target.fragments):
            if mine != theirs:
                break
            common += 1
        ups = "../" * (len(base) - common)
        rest = "/".join(fragment.name for fragment in target.fragments[common:])
        return (ups + rest) or "./"

    def __len__(self) -> int:
        return len(self.fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self.fragments)

    def __str__(self) -> str:
        return "/".join(fragment.name for fragment in self.fragments)


@dataclass
class Directory:
    """A directory owning its children outright (no back references)."""

    contents: dict[Fragment, Node] = field(default_factory=dict)

    def get(self, path: InternalPath) -> Node | None:
        """Return the node at `path` (relative to this directory), or None.

        The root path names this directory. Lookup stops with None as soon as a
        segment is missing or walks through a page.
        """
        node: Node = self
        for fragment in path:
            if not isinstance(node, Directory):
                return None
            child = node.contents.get(fragment)
            if child is None:
                return None
            node = child
        return node

    def get_page(self, path: InternalPath) -> Page | None:
        node = self.get(path)
        return node if isinstance(node, Page) else None

    def insert(self, path: InternalPath, node: Node) -> None:
        """Insert `node` at `path`, creating intermediate directories.

        Raises:
            RootInsertionError: If `path` is the root.
            PageInPathError: If a non-final segment already holds a page.
            OccupiedPathError: If the final segment is already occupied.
        """
        if not isinstance(node, (Page, Directory)):
            raise TypeError(f"expected a Page or Directory, got {type(node).__name__}")
        if path.is_root:
            raise RootInsertionError("cannot insert at the root path")

        directory = self
        walked = InternalPath.root()
        for fragment in path.parent:
            walked = walked.child(fragment)
            child = directory.contents.get(fragment)
            if child is None:
                child = directory.contents[fragment] = Directory()
            elif isinstance(child, Page):
                raise PageInPathError(f"cannot insert at {path}: {walked} is a page")
            directory = child

        if path.name in directory.contents:
            raise OccupiedPathError(f"cannot insert at {path}: path already occupied")
        directory.contents[path.name] = node

    def walk(
        self, ordered: bool = True, prefix: InternalPath | None = None
    ) -> Iterator[tuple[InternalPath, Page]]:
        """Yield every `(path, page)` below this directory, depth first.

        With `ordered`, siblings are visited in lexical fragment order so that
        repeated runs produce identical output; otherwise insertion order.
        """
        prefix = prefix or InternalPath.root()
        items = self.contents.items()
        if ordered:
            items = sorted(items, key=lambda item: item[0])
        for fragment, node in items:
            path = prefix.child(fragment)
            if isinstance(node, Page):
                yield path, node
            else:
                yield from node.walk(ordered, path)

    def __iter__(self) -> Iterator[tuple[InternalPath, Page]]:
        return self.walk()

    def __contains__(self, path: InternalPath) -> bool:
        return self.get(path) is not None


Node = Union[Page, Directory]


@dataclass
class Site:
    """The whole (sub)site: one root directory, built once then read."""

    root: Directory = field(default_factory=Directory)

    def insert(self, path: InternalPath, node: Node) -> None:
        self.root.insert(path, node)

    def get(self, path: InternalPath) -> Node | None:
        return self.root.get(path)

    def get_page(self, path: InternalPath) -> Page | None:
        return self.root.get_page(path)

    def walk(self, ordered: bool = True) -> Iterator[tuple[InternalPath, Page]]:
        return self.root.walk(ordered)

    def __iter__(self) -> Iterator[tuple[InternalPath, Page]]:
        return self.walk()

    def __contains__(self, path: InternalPath) -> bool:
        return path in self.root

    def __len__(self) -> int:
        return sum(1 for _ in self.walk(ordered=False))
