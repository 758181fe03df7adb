"""Canonical document model produced by package normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

UNKNOWN_DOCUMENT_ID = "unknown"

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


def clamp_heading_level(level: int) -> int:
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, level))


@dataclass(slots=True)
class BookMetadata:
    """Normalized package metadata; every field may be absent."""

    identifier: str | None = None
    title: str | None = None
    authors: list[str] = field(default_factory=list)
    language: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "title": self.title,
            "authors": list(self.authors),
            "language": self.language,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "BookMetadata":
        return cls(
            identifier=payload.get("identifier"),
            title=payload.get("title"),
            authors=list(payload.get("authors") or []),
            language=payload.get("language"),
            description=payload.get("description"),
        )


@dataclass(slots=True)
class ManifestItem:
    """One archive resource keyed by its manifest id."""

    id: str
    href: str
    media_type: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "href": self.href, "media_type": self.media_type}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ManifestItem":
        return cls(id=payload["id"], href=payload["href"], media_type=payload["media_type"])


@dataclass(slots=True)
class Spine:
    """Declared reading order as manifest ids."""

    items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {"items": list(self.items)}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Spine":
        return cls(items=list(payload.get("items") or []))


@dataclass(slots=True)
class TocEntry:
    """Table of contents node with a fragment-free href."""

    label: str
    href: str
    children: list["TocEntry"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "href": self.href,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TocEntry":
        return cls(
            label=payload["label"],
            href=payload["href"],
            children=[cls.from_dict(child) for child in payload.get("children") or []],
        )


@dataclass(slots=True)
class TextSpan:
    """A run of text with uniform style flags."""

    text: str
    bold: bool = False
    italic: bool = False

    def same_style(self, other: "TextSpan") -> bool:
        return self.bold == other.bold and self.italic == other.italic

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "bold": self.bold, "italic": self.italic}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TextSpan":
        return cls(
            text=payload["text"],
            bold=bool(payload.get("bold", False)),
            italic=bool(payload.get("italic", False)),
        )


@dataclass(slots=True)
class HeadingBlock:
    """Heading variant of a chapter block."""

    level: int
    spans: list[TextSpan] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.level = clamp_heading_level(self.level)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "heading", "level": self.level, "spans": [span.to_dict() for span in self.spans]}


@dataclass(slots=True)
class ParagraphBlock:
    """Paragraph variant of a chapter block."""

    spans: list[TextSpan] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "paragraph", "spans": [span.to_dict() for span in self.spans]}


ChapterBlock = Union[HeadingBlock, ParagraphBlock]


def block_from_dict(payload: dict[str, Any]) -> ChapterBlock:
    spans = [TextSpan.from_dict(span) for span in payload.get("spans") or []]
    kind = payload.get("kind")
    if kind == "heading":
        return HeadingBlock(level=int(payload.get("level", MIN_HEADING_LEVEL)), spans=spans)
    if kind == "paragraph":
        return ParagraphBlock(spans=spans)
    raise ValueError(f"Unknown chapter block kind: {kind!r}")


@dataclass(slots=True)
class Chapter:
    """One readable reading-order resource, built once at ingestion."""

    id: str
    title: str | None
    href: str
    blocks: list[ChapterBlock] = field(default_factory=list)
    plain_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "href": self.href,
            "blocks": [block.to_dict() for block in self.blocks],
            "plain_text": self.plain_text,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Chapter":
        return cls(
            id=payload["id"],
            title=payload.get("title"),
            href=payload["href"],
            blocks=[block_from_dict(block) for block in payload.get("blocks") or []],
            plain_text=payload.get("plain_text", ""),
        )


@dataclass(slots=True)
class Document:
    """Normalized e-book: metadata, manifest, reading order, TOC and chapters."""

    id: str
    metadata: BookMetadata = field(default_factory=BookMetadata)
    manifest: dict[str, ManifestItem] = field(default_factory=dict)
    spine: Spine = field(default_factory=Spine)
    toc: list[TocEntry] = field(default_factory=list)
    chapters: list[Chapter] = field(default_factory=list)
    source_path: str = ""

    @classmethod
    def empty(cls) -> "Document":
        return cls(id=UNKNOWN_DOCUMENT_ID)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "metadata": self.metadata.to_dict(),
            "content": {
                "manifest": {item_id: item.to_dict() for item_id, item in self.manifest.items()},
                "spine": self.spine.to_dict(),
                "toc": [entry.to_dict() for entry in self.toc],
                "chapters": [chapter.to_dict() for chapter in self.chapters],
            },
            "source_path": self.source_path,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Document":
        content = payload.get("content") or {}
        return cls(
            id=payload["id"],
            metadata=BookMetadata.from_dict(payload.get("metadata") or {}),
            manifest={
                item_id: ManifestItem.from_dict(item) for item_id, item in (content.get("manifest") or {}).items()
            },
            spine=Spine.from_dict(content.get("spine") or {}),
            toc=[TocEntry.from_dict(entry) for entry in content.get("toc") or []],
            chapters=[Chapter.from_dict(chapter) for chapter in content.get("chapters") or []],
            source_path=payload.get("source_path", ""),
        )
