from __future__ import annotations

from datetime import datetime
from pathlib import Path

from ebooklib import epub

from lectern.ingestion.assembler import DocumentAssembler
from lectern.ingestion.package.base import PackageReader
from lectern.ingestion.package.epub_reader import EbookLibPackageReader


def _build_epub(path: Path) -> None:
    book = epub.EpubBook()
    book.set_identifier("reader-id")
    book.set_title("Reader Sample")
    book.add_author("Ann Author")
    book.set_language("de")

    intro = epub.EpubHtml(uid="intro", title="Intro", file_name="text/intro.xhtml", lang="de")
    intro.content = "<html><body><p>Hallo.</p></body></html>"
    part = epub.EpubHtml(uid="part", title="Part", file_name="text/part.xhtml", lang="de")
    part.content = "<html><body><h1>Part</h1></body></html>"

    book.add_item(intro)
    book.add_item(part)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.toc = (epub.Link("text/intro.xhtml#start", "Intro", "intro-link"), (epub.Section("Body"), (part,)))
    book.spine = [intro, part]
    epub.write_epub(str(path), book, {"mtime": datetime(2024, 1, 2, 3, 4, 5)})


def test_reader_exposes_package_contract(tmp_path: Path) -> None:
    epub_path = tmp_path / "reader.epub"
    _build_epub(epub_path)

    reader = EbookLibPackageReader.open(epub_path)

    assert isinstance(reader, PackageReader)
    pairs = reader.raw_metadata()
    assert ("dc:title", "Reader Sample") in pairs
    assert ("dc:creator", "Ann Author") in pairs
    assert ("dc:language", "de") in pairs
    assert reader.declared_title() == "Reader Sample"

    assert ("dcterms:modified", "2024-01-02T03:04:05Z") in pairs
    assert not any(prop == "opf:meta" for prop, _value in pairs)
    assert reader.release_identifier() == "reader-id@2024-01-02T03:04:05Z"


def test_reader_exposes_manifest_spine_and_fragments(tmp_path: Path) -> None:
    epub_path = tmp_path / "reader.epub"
    _build_epub(epub_path)

    reader = EbookLibPackageReader.open(epub_path)
    resources = reader.resources()

    assert reader.reading_order() == ["intro", "part"]
    assert resources["intro"].path == "text/intro.xhtml"
    assert resources["intro"].media_type == "application/xhtml+xml"
    assert "Hallo." in (reader.fragment_text("intro") or "")
    assert reader.fragment_text("does-not-exist") is None


def test_reader_converts_navigation_tree(tmp_path: Path) -> None:
    epub_path = tmp_path / "reader.epub"
    _build_epub(epub_path)

    nav = EbookLibPackageReader.open(epub_path).navigation_tree()

    assert [point.label for point in nav] == ["Intro", "Body"]
    assert nav[0].target == "text/intro.xhtml#start"
    assert [child.label for child in nav[1].children] == ["Part"]


def test_reader_decodes_non_utf8_fragments() -> None:
    book = epub.EpubBook()
    raw = "<html><body><p>Привет, это проверка старой кодировки документа.</p></body></html>".encode("cp1251")
    book.add_item(epub.EpubItem(uid="legacy", file_name="legacy.xhtml", media_type="application/xhtml+xml", content=raw))

    text = EbookLibPackageReader(book).fragment_text("legacy")

    assert text is not None
    assert "<p>" in text


class _UndeclaredIdentifierReader(EbookLibPackageReader):
    """Hides dc:identifier pairs while the package keeps its unique-identifier link."""

    def raw_metadata(self) -> list[tuple[str, str]]:
        return [(prop, value) for prop, value in super().raw_metadata() if prop != "dc:identifier"]


def test_document_id_falls_back_to_release_identifier(tmp_path: Path) -> None:
    epub_path = tmp_path / "reader.epub"
    _build_epub(epub_path)
    assembler = DocumentAssembler(reader_factory=_UndeclaredIdentifierReader.open, id_factory=lambda: "generated")

    document = assembler.open(epub_path)

    assert document.metadata.identifier == "reader-id@2024-01-02T03:04:05Z"
    assert document.id == "reader-id@2024-01-02T03:04:05Z"


def test_reader_reads_named_meta_elements(tmp_path: Path) -> None:
    epub_path = tmp_path / "reader.epub"
    _build_epub(epub_path)

    pairs = EbookLibPackageReader.open(epub_path).raw_metadata()

    assert any(prop == "generator" and value for prop, value in pairs)


def test_empty_spine_document_is_kept_as_chapter() -> None:
    book = epub.EpubBook()
    blank = epub.EpubItem(uid="blank", file_name="blank.xhtml", media_type="application/xhtml+xml", content=b"")
    full = epub.EpubItem(uid="full", file_name="full.xhtml", media_type="application/xhtml+xml", content=b"<p>x</p>")
    book.add_item(blank)
    book.add_item(full)
    book.spine = ["blank", "full"]
    reader = EbookLibPackageReader(book)

    assert reader.fragment_text("blank") == ""

    document = DocumentAssembler(id_factory=lambda: "generated").assemble(reader, Path("inline.epub"))

    assert [chapter.id for chapter in document.chapters] == ["blank", "full"]
    assert document.chapters[0].blocks == []
    assert document.chapters[0].plain_text == ""
    assert document.chapters[0].title == "blank"
