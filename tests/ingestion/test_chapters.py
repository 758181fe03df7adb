from __future__ import annotations

from lectern.ingestion.chapters import build_chapter, build_chapters, derive_chapter_title, is_text_media_type
from lectern.ingestion.markup import BlockStrategy
from lectern.ingestion.models import ManifestItem, ParagraphBlock, TextSpan
from lectern.ingestion.package.base import NavPoint, PackageReader, ResourceEntry


class _StubReader:
    def __init__(self, fragments: dict[str, str | None]) -> None:
        self._fragments = fragments

    def raw_metadata(self) -> list[tuple[str, str]]:
        return []

    def declared_title(self) -> str | None:
        return None

    def release_identifier(self) -> str | None:
        return None

    def resources(self) -> dict[str, ResourceEntry]:
        return {}

    def reading_order(self) -> list[str]:
        return []

    def navigation_tree(self) -> list[NavPoint]:
        return []

    def fragment_text(self, resource_id: str) -> str | None:
        return self._fragments.get(resource_id)


def test_stub_reader_matches_package_reader_protocol() -> None:
    assert isinstance(_StubReader({}), PackageReader)


def test_exact_toc_label_wins_over_first_paragraph() -> None:
    blocks = [ParagraphBlock(spans=[TextSpan(text="Opening line")])]

    title = derive_chapter_title({"text/ch1.xhtml": "From TOC"}, "text/ch1.xhtml", blocks, "Opening line", "ch1")

    assert title == "From TOC"


def test_suffix_toc_label_is_used_when_roots_differ() -> None:
    title = derive_chapter_title({"ch1.xhtml": "Suffix label"}, "OEBPS/text/ch1.xhtml", [], "", "ch1")

    assert title == "Suffix label"


def test_title_falls_back_to_block_text_then_plain_text_line() -> None:
    blocks = [ParagraphBlock(spans=[TextSpan(text="   ")]), ParagraphBlock(spans=[TextSpan(text="Second block")])]

    assert derive_chapter_title({}, "ch1.xhtml", blocks, "ignored", "ch1") == "Second block"
    assert derive_chapter_title({}, "ch1.xhtml", [], "\n  \n  First line \nNext", "ch1") == "First line"


def test_title_falls_back_to_id_then_none() -> None:
    assert derive_chapter_title({}, "ch1.xhtml", [], "", "ch1") == "ch1"
    assert derive_chapter_title({}, "ch1.xhtml", [], "", "") is None


def test_media_type_check_accepts_html_variants() -> None:
    assert is_text_media_type("application/xhtml+xml")
    assert is_text_media_type("TEXT/HTML")
    assert not is_text_media_type("image/jpeg")
    assert not is_text_media_type("text/css")


def test_build_chapters_filters_reading_order() -> None:
    manifest = {
        "ch1": ManifestItem(id="ch1", href="text/ch1.xhtml", media_type="application/xhtml+xml"),
        "img": ManifestItem(id="img", href="images/cover.jpg", media_type="image/jpeg"),
        "gone": ManifestItem(id="gone", href="text/gone.xhtml", media_type="application/xhtml+xml"),
        "ch2": ManifestItem(id="ch2", href="text/ch2.xhtml", media_type="text/html"),
    }
    reader = _StubReader(
        {
            "ch1": "<h1>One</h1><p>Body one</p>",
            "img": "<p>not text</p>",
            "ch2": "<p>Body two</p>",
        }
    )

    chapters = build_chapters(reader, manifest, ["ch1", "missing", "img", "gone", "ch2"], {"ch2.xhtml": "Two"})

    assert [chapter.id for chapter in chapters] == ["ch1", "ch2"]
    assert [chapter.href for chapter in chapters] == ["text/ch1.xhtml", "text/ch2.xhtml"]
    assert chapters[0].title == "One"
    assert chapters[0].plain_text == "One\n\nBody one"
    assert chapters[1].title == "Two"


def test_chapter_without_text_blocks_is_retained() -> None:
    item = ManifestItem(id="cover", href="cover.xhtml", media_type="application/xhtml+xml")

    chapter = build_chapter(item, "<html><body><img src='cover.jpg'/></body></html>", {})

    assert chapter.blocks == []
    assert chapter.plain_text == ""
    assert chapter.title == "cover"


def test_build_chapter_uses_selected_strategy() -> None:
    item = ManifestItem(id="ch1", href="ch1.xhtml", media_type="application/xhtml+xml")
    html = "<p>Plain <em>emphasis</em></p>"

    scanned = build_chapter(item, html, {}, BlockStrategy.SCAN)
    styled = build_chapter(item, html, {}, BlockStrategy.STYLED)

    assert scanned.blocks[0].spans == [TextSpan(text="Plain emphasis")]
    assert styled.blocks[0].spans == [TextSpan(text="Plain"), TextSpan(text="emphasis", italic=True)]
    assert scanned.plain_text == styled.plain_text == "Plain emphasis"
