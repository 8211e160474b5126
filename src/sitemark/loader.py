"""Build a site from a directory of markup files."""

from __future__ import annotations

import logging
from pathlib import Path

from sitemark.config import SITEMARK_ENCODING, SITEMARK_SOURCE_SUFFIX
from sitemark.exceptions import SitemarkError
from sitemark.links import duplicate_section_ids
from sitemark.parser import parse_page
from sitemark.schemas import Page
from sitemark.site import InternalPath, Site
from sitemark.slots import Resolver, iter_slots, resolve_slots

logger = logging.getLogger(__name__)


def find_sources(source_dir: Path, suffix: str = SITEMARK_SOURCE_SUFFIX) -> list[Path]:
    """Markup files below `source_dir`, sorted by path.

    Raises:
        SitemarkError: If `source_dir` is not a directory.
    """
    if not source_dir.is_dir():
        raise SitemarkError(f"Source directory not found: {source_dir}")
    return sorted(path for path in source_dir.rglob(f"*{suffix}") if path.is_file())


def find_assets(assets_dir: Path) -> set[InternalPath]:
    """Internal paths of the files below `assets_dir` (empty if it does not exist)."""
    if not assets_dir.is_dir():
        return set()
    return {
        InternalPath.of(*path.relative_to(assets_dir).parts)
        for path in assets_dir.rglob("*")
        if path.is_file()
    }


def path_for_source(source: Path, source_dir: Path) -> InternalPath:
    """Internal path of a source file: its relative path without the suffix."""
    relative = source.relative_to(source_dir).with_suffix("")
    return InternalPath.of(*relative.parts)


def load_page(
    source: Path,
    *,
    resolver: Resolver | None = None,
    encoding: str = SITEMARK_ENCODING,
    display_name: str | None = None,
) -> Page:
    """Read, parse and (when a resolver is given) resolve the slots of one file."""
    try:
        text = source.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise SitemarkError(f"Cannot read {source}: {exc}") from exc

    name = display_name or str(source)
    page = parse_page(text, filename=name)
    if resolver is not None:
        page = resolve_slots(page, resolver)
    elif next(iter_slots(page), None) is not None:
        logger.warning("%s contains slots but no resolver was given", name)

    for section_id in duplicate_section_ids(page):
        logger.warning("%s: section id %r is used more than once", name, section_id)
    return page


def load_site(
    source_dir: Path,
    *,
    resolver: Resolver | None = None,
    suffix: str = SITEMARK_SOURCE_SUFFIX,
    encoding: str = SITEMARK_ENCODING,
) -> Site:
    """Parse every markup file below `source_dir` into a new `Site`.

    `physics/gravity.smk` becomes the page at `physics/gravity`.

    Raises:
        SitemarkError: If the directory is missing or a file cannot be read.
        ParseError: On the first markup error, tagged with the file name.
        TreeError: If two files claim conflicting paths.
    """
    site = Site()
    for source in find_sources(source_dir, suffix):
        location = path_for_source(source, source_dir)
        display_name = source.relative_to(source_dir).as_posix()
        page = load_page(source, resolver=resolver, encoding=encoding, display_name=display_name)
        site.insert(location, page)
        logger.debug("Loaded %s as /%s", display_name, location)
    return site
