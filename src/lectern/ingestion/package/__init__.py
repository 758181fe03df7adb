"""Package reader contract and the EbookLib-backed implementation."""

from .base import NavPoint, PackageReader, ResourceEntry
from .epub_reader import EbookLibPackageReader

__all__ = ["EbookLibPackageReader", "NavPoint", "PackageReader", "ResourceEntry"]
