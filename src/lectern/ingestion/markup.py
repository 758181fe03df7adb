"""Convert XHTML reading-order fragments into heading/paragraph blocks.

Two strategies produce the same block vocabulary:

* ``scan`` walks the raw markup tag by tag and emits one unstyled span per
  recognized element. It never builds a tree, so it tolerates truncated or
  malformed fragments.
* ``styled`` parses the fragment with BeautifulSoup and keeps inline
  bold/italic runs as separate spans.

Neither strategy raises; the worst case is a single flattened paragraph or
an empty list.
"""

from __future__ import annotations

from enum import Enum
import re
from typing import Iterable, Iterator, Sequence

from bs4 import BeautifulSoup, CData, NavigableString, Tag

from lectern.ingestion.models import ChapterBlock, HeadingBlock, ParagraphBlock, TextSpan
from lectern.ingestion.normalization import normalize_whitespace

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_PARAGRAPH_TAGS = frozenset({"p", "blockquote"})
_LIST_ITEM_TAG = "li"
_LEAF_BLOCK_TAGS = _HEADING_TAGS | _PARAGRAPH_TAGS | {_LIST_ITEM_TAG}

# Skipped wholesale by both strategies; their text is never chapter content.
_OPAQUE_TAGS = frozenset({"head", "script", "style"})

_CONTAINER_TAGS = frozenset(
    {
        "html", "body", "div", "section", "article", "main", "header", "footer", "aside", "nav",
        "ul", "ol", "dl", "dt", "dd", "figure", "figcaption", "table", "thead", "tbody", "tfoot",
        "tr", "td", "th", "pre", "hr", "address", "center",
    }
)
_BLOCK_LEVEL_TAGS = _LEAF_BLOCK_TAGS | _CONTAINER_TAGS

_BOLD_TAGS = frozenset({"b", "strong"})
_ITALIC_TAGS = frozenset({"i", "em", "cite", "dfn", "var"})
_BOLD_STYLE_RE = re.compile(r"font-weight:\s*(bold|bolder|[6-9]00)", re.IGNORECASE)
_ITALIC_STYLE_RE = re.compile(r"font-style:\s*(italic|oblique)", re.IGNORECASE)

_LIST_PREFIX = "- "


class BlockStrategy(str, Enum):
    """Selectable fragment parsing strategy."""

    SCAN = "scan"
    STYLED = "styled"


# --------------------------------------------------------------------------- spans


def merge_spans(spans: Iterable[TextSpan], separator: str = "") -> list[TextSpan]:
    """Merge adjacent spans that share style flags."""

    merged: list[TextSpan] = []
    for span in spans:
        if merged and merged[-1].same_style(span):
            last = merged[-1]
            merged[-1] = TextSpan(text=last.text + separator + span.text, bold=last.bold, italic=last.italic)
        else:
            merged.append(TextSpan(text=span.text, bold=span.bold, italic=span.italic))
    return merged


def finalize_spans(runs: Iterable[TextSpan]) -> list[TextSpan]:
    """Merge raw runs, collapse whitespace, and drop runs left empty."""

    spans: list[TextSpan] = []
    for span in merge_spans(runs):
        text = normalize_whitespace(span.text)
        if text:
            spans.append(TextSpan(text=text, bold=span.bold, italic=span.italic))
    return merge_spans(spans, separator=" ")


def spans_to_text(spans: Sequence[TextSpan]) -> str:
    return " ".join(text for text in (span.text.strip() for span in spans) if text)


def block_text(block: ChapterBlock) -> str:
    return spans_to_text(block.spans)


def blocks_to_plain_text(blocks: Sequence[ChapterBlock]) -> str:
    """Join block texts with a blank line, skipping blocks with no text."""

    return "\n\n".join(text for text in (block_text(block) for block in blocks) if text.strip())


def compact_blocks(blocks: Iterable[ChapterBlock]) -> list[ChapterBlock]:
    """Drop empty spans and the blocks they leave without text."""

    compacted: list[ChapterBlock] = []
    for block in blocks:
        spans = [span for span in block.spans if span.text.strip()]
        if not spans:
            continue
        if isinstance(block, HeadingBlock):
            compacted.append(HeadingBlock(level=block.level, spans=spans))
        else:
            compacted.append(ParagraphBlock(spans=spans))
    return compacted


# --------------------------------------------------------------------------- plain text


def fragment_to_text(fragment: str) -> str:
    """Reduce inner markup to a single line of text."""

    if "<" not in fragment and "&" not in fragment:
        return normalize_whitespace(fragment)
    soup = BeautifulSoup(fragment, "html.parser")
    return normalize_whitespace(soup.get_text(" "))


def html_to_plain_text(html: str) -> str:
    """Extract a whole fragment's text, one line per block-level element."""

    soup = BeautifulSoup(html, "lxml")
    for tag in soup(list(_OPAQUE_TAGS)):
        tag.decompose()
    for tag in soup.find_all("br"):
        tag.replace_with("\n")
    for tag in soup.find_all(list(_BLOCK_LEVEL_TAGS)):
        tag.insert_after("\n")

    root = soup.body or soup
    lines = (normalize_whitespace(line) for line in root.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def _fallback_blocks(html: str) -> list[ChapterBlock]:
    text = html_to_plain_text(html).strip()
    if not text:
        return []
    return [ParagraphBlock(spans=[TextSpan(text=text)])]


# --------------------------------------------------------------------------- tag scan


def _heading_level(name: str) -> int:
    try:
        return int(name[1:])
    except ValueError:
        return 1


def _tag_names(tag_body: str) -> tuple[str, str]:
    """Return (qualified, local) lower-cased names of a tag body."""

    qualified = tag_body.split(None, 1)[0].rstrip("/").lower()
    return qualified, qualified.rsplit(":", 1)[-1]


def _scan_block(name: str, text: str) -> ChapterBlock | None:
    if name in _HEADING_TAGS:
        return HeadingBlock(level=_heading_level(name), spans=[TextSpan(text=text)])
    if name in _PARAGRAPH_TAGS:
        return ParagraphBlock(spans=[TextSpan(text=text)])
    if name == _LIST_ITEM_TAG:
        return ParagraphBlock(spans=[TextSpan(text=f"{_LIST_PREFIX}{text}")])
    return None


def html_to_blocks(html: str) -> list[ChapterBlock]:
    """Scan raw markup left to right and emit a block per recognized element."""

    blocks: list[ChapterBlock] = []
    index = 0

    while True:
        open_idx = html.find("<", index)
        if open_idx == -1:
            break

        if html.startswith("<!--", open_idx):
            comment_end = html.find("-->", open_idx + 4)
            if comment_end == -1:
                break
            index = comment_end + 3
            continue

        close_idx = html.find(">", open_idx + 1)
        if close_idx == -1:
            break
        tag_body = html[open_idx + 1 : close_idx].strip()
        tag_end = close_idx + 1

        if not tag_body or tag_body[0] in "!?/":
            index = tag_end
            continue

        qualified, name = _tag_names(tag_body)
        if not name:
            index = tag_end
            continue

        if tag_body.endswith("/"):
            if name == "br":
                # Line-break marker; carries no text so compaction removes it.
                blocks.append(ParagraphBlock(spans=[TextSpan(text="")]))
            index = tag_end
            continue

        if name not in _LEAF_BLOCK_TAGS and name not in _OPAQUE_TAGS:
            # Descend into unrecognized containers so nested blocks are found.
            index = tag_end
            continue

        closing = re.compile(re.escape(f"</{qualified}>"), re.IGNORECASE).search(html, tag_end)
        if closing is None:
            index = tag_end
            continue

        if name not in _OPAQUE_TAGS:
            text = fragment_to_text(html[tag_end : closing.start()])
            if text:
                block = _scan_block(name, text)
                if block is not None:
                    blocks.append(block)
        index = closing.end()

    blocks = compact_blocks(blocks)
    if not blocks:
        return _fallback_blocks(html)
    return blocks


# --------------------------------------------------------------------------- styled


def _style_flags(tag: Tag, bold: bool, italic: bool) -> tuple[bool, bool]:
    name = (tag.name or "").lower()
    style = tag.get("style") or ""
    if isinstance(style, list):
        style = ";".join(style)
    bold = bold or name in _BOLD_TAGS or bool(_BOLD_STYLE_RE.search(style))
    italic = italic or name in _ITALIC_TAGS or bool(_ITALIC_STYLE_RE.search(style))
    return bold, italic


def _is_text(node: object) -> bool:
    # Comments, doctypes and processing instructions subclass NavigableString too.
    return type(node) is NavigableString or type(node) is CData


def _inline_runs(tag: Tag, bold: bool, italic: bool) -> Iterator[TextSpan]:
    for child in tag.children:
        if _is_text(child):
            yield TextSpan(text=str(child), bold=bold, italic=italic)
        elif isinstance(child, Tag):
            if (child.name or "").lower() == "br":
                yield TextSpan(text=" ", bold=bold, italic=italic)
                continue
            child_bold, child_italic = _style_flags(child, bold, italic)
            yield from _inline_runs(child, child_bold, child_italic)


class _StyledBlockBuilder:
    """Accumulate styled runs into blocks while walking a parsed fragment."""

    def __init__(self) -> None:
        self.blocks: list[ChapterBlock] = []
        self._runs: list[TextSpan] = []
        self._prefix: str | None = None

    def walk(self, node: Tag, bold: bool, italic: bool) -> None:
        for child in node.children:
            if _is_text(child):
                self._runs.append(TextSpan(text=str(child), bold=bold, italic=italic))
                continue
            if not isinstance(child, Tag):
                continue

            name = (child.name or "").lower()
            if name == "br":
                self._runs.append(TextSpan(text=" ", bold=bold, italic=italic))
                continue

            child_bold, child_italic = _style_flags(child, bold, italic)
            if name in _LEAF_BLOCK_TAGS and child.find(list(_LEAF_BLOCK_TAGS)) is None:
                self.flush()
                prefix = _LIST_PREFIX if name == _LIST_ITEM_TAG else None
                self._emit(name, list(_inline_runs(child, child_bold, child_italic)), prefix)
            elif name in _BLOCK_LEVEL_TAGS:
                self.flush()
                if name == _LIST_ITEM_TAG:
                    self._prefix = _LIST_PREFIX
                self.walk(child, child_bold, child_italic)
                self.flush()
                if name == _LIST_ITEM_TAG:
                    self._prefix = None
            else:
                self.walk(child, child_bold, child_italic)

    def flush(self) -> None:
        if self._runs:
            runs, self._runs = self._runs, []
            self._emit("p", runs)

    def _emit(self, name: str, runs: list[TextSpan], prefix: str | None = None) -> None:
        spans = finalize_spans(runs)
        if not spans:
            return
        prefix = prefix or self._prefix
        if prefix:
            first = spans[0]
            spans[0] = TextSpan(text=f"{prefix}{first.text}", bold=first.bold, italic=first.italic)
            self._prefix = None
        if name in _HEADING_TAGS:
            self.blocks.append(HeadingBlock(level=_heading_level(name), spans=spans))
        else:
            self.blocks.append(ParagraphBlock(spans=spans))


def html_to_styled_blocks(html: str) -> list[ChapterBlock]:
    """Parse a fragment into blocks whose spans keep bold/italic runs."""

    soup = BeautifulSoup(html, "lxml")
    for tag in soup(list(_OPAQUE_TAGS)):
        tag.decompose()

    builder = _StyledBlockBuilder()
    builder.walk(soup.body or soup, bold=False, italic=False)
    builder.flush()

    blocks = compact_blocks(builder.blocks)
    if not blocks:
        return _fallback_blocks(html)
    return blocks


def parse_blocks(html: str, strategy: BlockStrategy = BlockStrategy.SCAN) -> list[ChapterBlock]:
    if BlockStrategy(strategy) is BlockStrategy.STYLED:
        return html_to_styled_blocks(html)
    return html_to_blocks(html)
