"""Package reader contract consumed by the normalization pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(slots=True)
class ResourceEntry:
    """Raw manifest resource as declared by the package."""

    path: str
    media_type: str


@dataclass(slots=True)
class NavPoint:
    """Raw navigation node; ``target`` may carry a ``#fragment``."""

    label: str
    target: str
    children: list["NavPoint"] = field(default_factory=list)


@runtime_checkable
class PackageReader(Protocol):
    """Protocol every opened package must implement."""

    def raw_metadata(self) -> list[tuple[str, str]]:
        """Return metadata as ordered, possibly namespaced (property, value) pairs."""

    def declared_title(self) -> str | None:
        """Return the package's own title, when it exposes one directly."""

    def release_identifier(self) -> str | None:
        """Return the package-level release identifier, if any."""

    def resources(self) -> dict[str, ResourceEntry]:
        """Return the manifest keyed by resource id."""

    def reading_order(self) -> list[str]:
        """Return resource ids in declared reading order."""

    def navigation_tree(self) -> list[NavPoint]:
        """Return the table-of-contents source tree."""

    def fragment_text(self, resource_id: str) -> str | None:
        """Return the raw markup of a resource, or None when unavailable."""
