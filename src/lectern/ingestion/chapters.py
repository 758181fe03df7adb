"""Build the ordered chapter list from reading order and manifest."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from lectern.ingestion.markup import BlockStrategy, block_text, blocks_to_plain_text, html_to_plain_text, parse_blocks
from lectern.ingestion.models import Chapter, ChapterBlock, ManifestItem
from lectern.ingestion.package.base import PackageReader
from lectern.ingestion.toc import match_toc_label

logger = logging.getLogger(__name__)


def is_text_media_type(media_type: str) -> bool:
    lowered = media_type.lower()
    return "html" in lowered or "xhtml" in lowered


def derive_chapter_title(
    toc_labels: Mapping[str, str],
    resource_path: str,
    blocks: Sequence[ChapterBlock],
    plain_text: str,
    fallback_id: str,
) -> str | None:
    """Pick a chapter title; the first source that yields one wins.

    Order: exact TOC path, TOC path suffix, first non-empty block, first
    non-blank line of the plain text, the manifest id.
    """

    label = toc_labels.get(resource_path)
    if label is not None:
        return label

    label = match_toc_label(toc_labels, resource_path)
    if label is not None:
        return label

    for block in blocks:
        text = block_text(block).strip()
        if text:
            return text

    for line in plain_text.splitlines():
        if line.strip():
            return line.strip()

    if fallback_id:
        return fallback_id
    return None


def build_chapter(
    item: ManifestItem,
    html: str,
    toc_labels: Mapping[str, str],
    strategy: BlockStrategy = BlockStrategy.SCAN,
) -> Chapter:
    blocks = parse_blocks(html, strategy)
    plain_text = blocks_to_plain_text(blocks) if blocks else html_to_plain_text(html)
    title = derive_chapter_title(toc_labels, item.href, blocks, plain_text, item.id)
    return Chapter(id=item.id, title=title, href=item.href, blocks=blocks, plain_text=plain_text)


def build_chapters(
    reader: PackageReader,
    manifest: Mapping[str, ManifestItem],
    reading_order: Sequence[str],
    toc_labels: Mapping[str, str],
    strategy: BlockStrategy = BlockStrategy.SCAN,
) -> list[Chapter]:
    """Build one chapter per readable reading-order entry, in order."""

    chapters: list[Chapter] = []
    for item_id in reading_order:
        item = manifest.get(item_id)
        if item is None:
            logger.debug("Skipping spine entry %s: not in manifest", item_id)
            continue
        if not is_text_media_type(item.media_type):
            logger.debug("Skipping spine entry %s: media type %s", item_id, item.media_type)
            continue

        html = reader.fragment_text(item_id)
        if html is None:
            logger.debug("Skipping spine entry %s: content unavailable", item_id)
            continue

        chapters.append(build_chapter(item, html, toc_labels, strategy))
    return chapters
