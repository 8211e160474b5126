"""Write a site to disk: copy assets and render every page."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from sitemark.config import SITEMARK_ENCODING
from sitemark.exceptions import GenerationError
from sitemark.render import Context, RenderOptions, render_page
from sitemark.site import Site

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    """Where generated files go."""

    def create_dir(self, path: Path) -> None: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def copy_file(self, source: Path, destination: Path) -> None: ...


class FileSystemSink:
    """Output sink writing to the local filesystem.

    Every `OSError`, and any encoding failure on write, is re-raised as
    `GenerationError` naming the operation and the path involved. Files
    already written are left in place.
    """

    def __init__(self, encoding: str = SITEMARK_ENCODING) -> None:
        self.encoding = encoding

    def create_dir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GenerationError("create-dir", path, exc) from exc

    def write_text(self, path: Path, content: str) -> None:
        try:
            with path.open("w", encoding=self.encoding) as handle:
                handle.write(content)
        except (OSError, UnicodeEncodeError) as exc:
            raise GenerationError("write-file", path, exc) from exc

    def copy_file(self, source: Path, destination: Path) -> None:
        try:
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise GenerationError("copy", source, exc) from exc


@dataclass
class GenerationReport:
    """What a generation run produced."""

    pages: list[Path] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)


@dataclass
class Generator:
    """Turns a `Site` into HTML files below `output_dir`.

    Attributes:
        site: The populated document tree.
        output_dir: Destination directory of the generated site.
        assets_dir: Directory mirrored byte for byte into `output_dir`, or
            None when there are no assets.
        sink: Output sink; defaults to the local filesystem.
        options: Page rendering options.
    """

    site: Site
    output_dir: Path
    assets_dir: Path | None = None
    sink: OutputSink = field(default_factory=FileSystemSink)
    options: RenderOptions = field(default_factory=RenderOptions)

    def generate(self) -> GenerationReport:
        """Copy assets (unless they already live in the output directory), then write pages."""
        report = GenerationReport()
        if self.assets_dir is not None and not self._assets_in_place():
            report.assets = self.copy_assets()
        report.pages = self.generate_pages()
        logger.info(
            "Generated %d pages and copied %d assets into %s",
            len(report.pages),
            len(report.assets),
            self.output_dir,
        )
        return report

    def _assets_in_place(self) -> bool:
        return self.assets_dir.resolve() == self.output_dir.resolve()

    def asset_pairs(self) -> list[tuple[Path, Path]]:
        """List `(source, destination)` for every file below the assets directory."""
        if self.assets_dir is None:
            return []
        output = self.output_dir.resolve()
        pairs: list[tuple[Path, Path]] = []
        pending = [Path()]
        while pending:
            relative = pending.pop()
            source_dir = self.assets_dir / relative
            try:
                entries = sorted(source_dir.iterdir())
            except OSError as exc:
                raise GenerationError("read-dir", source_dir, exc) from exc
            for entry in entries:
                if entry.is_dir():
                    if entry.resolve() != output:
                        pending.append(relative / entry.name)
                else:
                    pairs.append((entry, self.output_dir / relative / entry.name))
        pairs.sort()
        return pairs

    def copy_assets(self) -> list[Path]:
        copied: list[Path] = []
        for source, destination in self.asset_pairs():
            self.sink.create_dir(destination.parent)
            self.sink.copy_file(source, destination)
            logger.debug("Copied asset %s -> %s", source, destination)
            copied.append(destination)
        return copied

    def generate_pages(self) -> list[Path]:
        written: list[Path] = []
        for location, page in self.site.walk():
            target = self.output_dir / location.to_fs_path()
            self.sink.create_dir(target.parent)
            self.sink.write_text(target, render_page(page, Context(location), self.options))
            logger.debug("Wrote page %s", target)
            written.append(target)
        return written
