"""Ingestion package interfaces."""

from .assembler import DocumentAssembler
from .errors import IngestionError, PackageIOError, PackageParseError
from .markup import BlockStrategy

__all__ = ["BlockStrategy", "DocumentAssembler", "IngestionError", "PackageIOError", "PackageParseError"]
