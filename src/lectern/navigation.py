"""Chapter cursor kept beside, never inside, an opened document."""

from __future__ import annotations

from dataclasses import dataclass

from lectern.ingestion.models import Chapter, Document


@dataclass(slots=True)
class ReaderState:
    """Active document plus a bounds-checked chapter index."""

    active_document: Document | None = None
    current_chapter: int | None = None

    def set_active_document(self, document: Document) -> None:
        self.current_chapter = 0 if document.chapters else None
        self.active_document = document

    def current(self) -> tuple[Chapter, int] | None:
        if self.current_chapter is None or self.active_document is None:
            return None
        chapters = self.active_document.chapters
        if not 0 <= self.current_chapter < len(chapters):
            return None
        return chapters[self.current_chapter], self.current_chapter

    def chapter_count(self) -> int:
        if self.active_document is None:
            return 0
        return len(self.active_document.chapters)

    def current_chapter_href(self) -> str | None:
        current = self.current()
        if current is None:
            return None
        chapter, _index = current
        return chapter.href

    def next_chapter(self) -> bool:
        if self.current_chapter is None:
            return False
        if self.current_chapter + 1 < self.chapter_count():
            self.current_chapter += 1
            return True
        return False

    def previous_chapter(self) -> bool:
        if self.current_chapter is None:
            return False
        if self.current_chapter > 0:
            self.current_chapter -= 1
            return True
        return False

    def jump_to_chapter_href(self, href: str) -> bool:
        if self.active_document is None:
            return False
        for index, chapter in enumerate(self.active_document.chapters):
            if chapter.href == href:
                self.current_chapter = index
                return True
        return False
