"""Compose metadata, manifest, reading order, TOC and chapters into a document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable
import uuid

from lectern.ingestion.chapters import build_chapters
from lectern.ingestion.errors import IngestionError, PackageIOError, PackageParseError
from lectern.ingestion.markup import BlockStrategy
from lectern.ingestion.metadata import normalize_metadata
from lectern.ingestion.models import Document, ManifestItem, Spine
from lectern.ingestion.package.base import PackageReader
from lectern.ingestion.package.epub_reader import EbookLibPackageReader
from lectern.ingestion.toc import build_toc_entries, build_toc_label_map

logger = logging.getLogger(__name__)

ReaderFactory = Callable[[Path], PackageReader]
IdFactory = Callable[[], str]


def _uuid4_id() -> str:
    return str(uuid.uuid4())


class DocumentAssembler:
    """Open packages and normalize them into ``Document`` records."""

    def __init__(
        self,
        *,
        reader_factory: ReaderFactory = EbookLibPackageReader.open,
        id_factory: IdFactory = _uuid4_id,
        strategy: BlockStrategy | str = BlockStrategy.SCAN,
    ) -> None:
        self._reader_factory = reader_factory
        self._id_factory = id_factory
        self._strategy = BlockStrategy(strategy)

    @property
    def strategy(self) -> BlockStrategy:
        return self._strategy

    def open(self, path: str | Path) -> Document:
        """Open the package at ``path``; raises ``PackageIOError`` or ``PackageParseError``."""

        source = Path(path)
        reader = self._reader_factory(source)
        document = self.assemble(reader, source)
        logger.info(
            "Opened %s: %d chapters, %d TOC entries (id=%s)",
            source,
            len(document.chapters),
            len(document.toc),
            document.id,
        )
        return document

    def assemble(self, reader: PackageReader, source_path: str | Path) -> Document:
        release_identifier = reader.release_identifier()
        metadata = normalize_metadata(
            reader.raw_metadata(),
            declared_title=reader.declared_title(),
            release_identifier=release_identifier,
        )

        manifest = {
            item_id: ManifestItem(id=item_id, href=entry.path, media_type=entry.media_type)
            for item_id, entry in reader.resources().items()
        }
        reading_order = list(reader.reading_order())
        nav = reader.navigation_tree()
        toc_labels = build_toc_label_map(nav)
        chapters = build_chapters(reader, manifest, reading_order, toc_labels, self._strategy)

        return Document(
            id=self._resolve_id(metadata.identifier, release_identifier),
            metadata=metadata,
            manifest=manifest,
            spine=Spine(items=reading_order),
            toc=build_toc_entries(nav),
            chapters=chapters,
            source_path=str(source_path),
        )

    def _resolve_id(self, identifier: str | None, release_identifier: str | None) -> str:
        return identifier or release_identifier or self._id_factory()


__all__ = ["DocumentAssembler", "IngestionError", "PackageIOError", "PackageParseError"]
