"""Ingestion error kinds surfaced to callers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class IngestionError(Exception):
    """Domain error for package open failures."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


@dataclass(slots=True)
class PackageIOError(IngestionError):
    """The archive could not be read from storage."""


@dataclass(slots=True)
class PackageParseError(IngestionError):
    """The archive was readable but structurally invalid."""
