"""Local configuration for sitemark."""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_SOURCE_DIR = "content"
DEFAULT_ASSETS_DIR = "assets"
DEFAULT_OUTPUT_DIR = "site"
DEFAULT_SOURCE_SUFFIX = ".smk"
DEFAULT_ENCODING = "utf-8"
DEFAULT_STYLESHEET = "styles.css"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SITEMARK_SOURCE_DIR = Path(os.getenv("SITEMARK_SOURCE_DIR", DEFAULT_SOURCE_DIR)).expanduser()
SITEMARK_ASSETS_DIR = Path(os.getenv("SITEMARK_ASSETS_DIR", DEFAULT_ASSETS_DIR)).expanduser()
SITEMARK_OUTPUT_DIR = Path(os.getenv("SITEMARK_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)).expanduser()
SITEMARK_SOURCE_SUFFIX = os.getenv("SITEMARK_SOURCE_SUFFIX", DEFAULT_SOURCE_SUFFIX)
SITEMARK_ENCODING = os.getenv("SITEMARK_ENCODING", DEFAULT_ENCODING)
# Internal path of the stylesheet linked from every page; empty disables the link.
SITEMARK_STYLESHEET = os.getenv("SITEMARK_STYLESHEET", DEFAULT_STYLESHEET)
SITEMARK_INCLUDE_TOC = _env_flag("SITEMARK_INCLUDE_TOC", True)
