"""CLI command that opens one EPUB package and prints its normalized document."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from lectern.config import IngestionSettings
from lectern.ingestion.assembler import DocumentAssembler
from lectern.ingestion.errors import IngestionError
from lectern.ingestion.markup import BlockStrategy
from lectern.ingestion.models import Document

logger = logging.getLogger(__name__)


def _summary(document: Document) -> dict[str, object]:
    return {
        "id": document.id,
        "source_path": document.source_path,
        "title": document.metadata.title,
        "authors": list(document.metadata.authors),
        "language": document.metadata.language,
        "chapter_count": len(document.chapters),
        "toc_count": len(document.toc),
        "chapters": [
            {
                "id": chapter.id,
                "title": chapter.title,
                "href": chapter.href,
                "block_count": len(chapter.blocks),
            }
            for chapter in document.chapters
        ],
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Open an EPUB package and emit its normalized document as JSON")
    parser.add_argument("path", nargs="?", help="EPUB file to open; omitted opens an empty document")
    parser.add_argument("--full", action="store_true", help="Emit the full serialized document")
    parser.add_argument(
        "--strategy",
        choices=[item.value for item in BlockStrategy],
        default=None,
        help="Markup block parser (defaults to LECTERN_BLOCK_STRATEGY or 'scan')",
    )
    args = parser.parse_args(argv)

    settings = IngestionSettings.from_env()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level_number,
    )
    strategy = BlockStrategy(args.strategy) if args.strategy else settings.block_strategy

    if args.path is None:
        document = Document.empty()
    else:
        assembler = DocumentAssembler(strategy=strategy)
        try:
            document = assembler.open(Path(args.path))
        except IngestionError as exc:
            logger.error("Failed to open %s: %s", args.path, exc)
            print(json.dumps({"path": args.path, "error": str(exc)}, ensure_ascii=True, indent=2))
            return 1

    payload = document.to_dict() if args.full else _summary(document)
    print(json.dumps(payload, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
