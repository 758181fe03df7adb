"""Text and href normalization helpers used during ingestion."""

from __future__ import annotations

from pathlib import PurePosixPath
import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_fragment(href: str) -> str:
    """Drop a trailing ``#fragment`` from an archive path."""

    prefix, _sep, _fragment = href.partition("#")
    return prefix


def path_ends_with(path: str, suffix: str) -> bool:
    """Component-wise suffix test, so ``a/ch1.xhtml`` matches ``ch1.xhtml`` but not ``h1.xhtml``."""

    suffix_parts = PurePosixPath(suffix).parts
    if not suffix_parts:
        return False
    path_parts = PurePosixPath(path).parts
    if len(suffix_parts) > len(path_parts):
        return False
    return path_parts[-len(suffix_parts) :] == suffix_parts
