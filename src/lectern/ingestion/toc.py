"""Table-of-contents flattening and href matching."""

from __future__ import annotations

from typing import Iterator, Mapping, Sequence

from lectern.ingestion.models import TocEntry
from lectern.ingestion.normalization import path_ends_with, strip_fragment
from lectern.ingestion.package.base import NavPoint


def build_toc_label_map(nav: Sequence[NavPoint]) -> dict[str, str]:
    """Map fragment-free target paths to the first label seen in a depth-first walk."""

    labels: dict[str, str] = {}
    for point in nav:
        _collect_nav_labels(point, labels)
    return labels


def _collect_nav_labels(point: NavPoint, labels: dict[str, str]) -> None:
    labels.setdefault(strip_fragment(point.target), point.label)
    for child in point.children:
        _collect_nav_labels(child, labels)


def build_toc_entries(nav: Sequence[NavPoint]) -> list[TocEntry]:
    return [
        TocEntry(
            label=point.label,
            href=strip_fragment(point.target),
            children=build_toc_entries(point.children),
        )
        for point in nav
    ]


def match_toc_label(labels: Mapping[str, str], resource_path: str) -> str | None:
    """Find a label whose key is a path suffix of ``resource_path``.

    Manifest and navigation documents may resolve paths against different
    roots (``OEBPS/Text/ch1.xhtml`` vs ``Text/ch1.xhtml``).
    """

    for candidate, label in labels.items():
        if path_ends_with(resource_path, candidate):
            return label
    return None


def flatten_toc(entries: Sequence[TocEntry], depth: int = 0) -> Iterator[tuple[int, TocEntry]]:
    for entry in entries:
        yield depth, entry
        yield from flatten_toc(entry.children, depth + 1)
