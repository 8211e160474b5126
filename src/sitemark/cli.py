"""Command line entry point: build or check a site."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sitemark.config import (
    SITEMARK_ASSETS_DIR,
    SITEMARK_INCLUDE_TOC,
    SITEMARK_OUTPUT_DIR,
    SITEMARK_SOURCE_DIR,
    SITEMARK_SOURCE_SUFFIX,
    SITEMARK_STYLESHEET,
)
from sitemark.exceptions import SitemarkError
from sitemark.generator import Generator
from sitemark.links import find_broken_links
from sitemark.loader import find_assets, load_site
from sitemark.render import RenderOptions
from sitemark.slots import MappingResolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sitemark", description="Compile markup pages into a static HTML site.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every file read and written")
    commands = parser.add_subparsers(dest="command", required=True)

    def add_source_options(command: argparse.ArgumentParser) -> None:
        command.add_argument("--source", type=Path, default=SITEMARK_SOURCE_DIR, help="Directory of markup files")
        command.add_argument("--suffix", default=SITEMARK_SOURCE_SUFFIX, help="Markup file suffix")
        command.add_argument("--assets", type=Path, default=SITEMARK_ASSETS_DIR, help="Directory of static files")
        command.add_argument(
            "-D",
            "--define",
            action="append",
            default=[],
            metavar="NAME=VALUE",
            help="Value for slot $[NAME]; may be repeated",
        )

    build = commands.add_parser("build", help="Generate the site")
    add_source_options(build)
    build.add_argument("--output", type=Path, default=SITEMARK_OUTPUT_DIR, help="Output directory")
    build.add_argument("--stylesheet", default=SITEMARK_STYLESHEET, help="Internal path of the stylesheet")
    build.add_argument(
        "--no-toc",
        dest="include_toc",
        action="store_false",
        default=SITEMARK_INCLUDE_TOC,
        help="Omit tables of contents",
    )
    build.add_argument("--check-links", action="store_true", help="Fail on broken internal links")

    check = commands.add_parser("check", help="Parse all pages and report broken internal links")
    add_source_options(check)
    return parser


def parse_defines(defines: list[str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for item in defines:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise SitemarkError(f"Invalid --define {item!r}, expected NAME=VALUE")
        values[name.strip()] = value
    return values


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        defines = parse_defines(args.define)
        resolver = MappingResolver(defines) if defines else None
        site = load_site(args.source, resolver=resolver, suffix=args.suffix)

        broken = []
        if args.command == "check" or args.check_links:
            broken = find_broken_links(site, find_assets(args.assets))
            for link in broken:
                logger.error("Broken link: %s", link)

        if args.command == "check":
            logger.info("Checked %d pages, %d broken links", len(site), len(broken))
            return 1 if broken else 0
        if broken:
            return 1

        assets = args.assets if args.assets.is_dir() else None
        if assets is None:
            logger.debug("No assets directory at %s", args.assets)
        options = RenderOptions(stylesheet=args.stylesheet or None, include_toc=args.include_toc)
        Generator(site=site, output_dir=args.output, assets_dir=assets, options=options).generate()
    except SitemarkError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
