"""sitemark: compile nested hypertext markup into a static HTML site."""

from sitemark.exceptions import (
    GenerationError,
    OccupiedPathError,
    PageInPathError,
    ParseError,
    RootInsertionError,
    SitemarkError,
    SlotResolutionError,
    TreeError,
)
from sitemark.generator import FileSystemSink, GenerationReport, Generator
from sitemark.links import BrokenLink, find_broken_links
from sitemark.loader import find_assets, load_site
from sitemark.parser import parse_body, parse_inline, parse_location, parse_page, parse_section
from sitemark.render import Context, Renderable, RenderOptions, escape_html, render, render_page
from sitemark.site import Directory, Fragment, InternalPath, Site
from sitemark.slots import MappingResolver, resolve_slots

__all__ = [
    "BrokenLink",
    "Context",
    "Directory",
    "FileSystemSink",
    "Fragment",
    "GenerationError",
    "GenerationReport",
    "Generator",
    "InternalPath",
    "MappingResolver",
    "OccupiedPathError",
    "PageInPathError",
    "ParseError",
    "RenderOptions",
    "Renderable",
    "RootInsertionError",
    "Site",
    "SitemarkError",
    "SlotResolutionError",
    "TreeError",
    "escape_html",
    "find_assets",
    "find_broken_links",
    "load_site",
    "parse_body",
    "parse_inline",
    "parse_location",
    "parse_page",
    "parse_section",
    "render",
    "render_page",
    "resolve_slots",
]
