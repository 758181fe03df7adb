"""EPUB package reader exposing raw metadata, manifest, spine and navigation."""

from __future__ import annotations

import logging
from pathlib import Path

from charset_normalizer import from_bytes
from ebooklib import epub

from lectern.ingestion.errors import PackageIOError, PackageParseError
from lectern.ingestion.normalization import normalize_whitespace
from lectern.ingestion.package.base import NavPoint, ResourceEntry

logger = logging.getLogger(__name__)

_NAMESPACE_PREFIXES: dict[str, str] = {
    epub.NAMESPACES["DC"]: "dc",
    epub.NAMESPACES["OPF"]: "opf",
}
_MODIFIED_PROPERTY = "dcterms:modified"


def _property_name(namespace: str | None, name: str | None, attrs: dict[str, str]) -> str | None:
    if name is None or (name == "meta" and namespace == epub.NAMESPACES["OPF"]):
        # ebooklib files every <meta> under the OPF namespace; the real name is an attribute.
        return attrs.get("property") or attrs.get("name")
    prefix = _NAMESPACE_PREFIXES.get(namespace or "", namespace)
    if not prefix:
        return name
    return f"{prefix}:{name}"


def _nav_points(toc: list[object] | tuple[object, ...]) -> list[NavPoint]:
    points: list[NavPoint] = []
    for node in toc:
        # ebooklib TOC nodes are Link, Section, (Section, [children]) or an in-memory EpubHtml
        if isinstance(node, tuple) and len(node) == 2:
            section, children = node
            points.append(
                NavPoint(
                    label=section.title or "",
                    target=getattr(section, "href", "") or "",
                    children=_nav_points(children),
                )
            )
        elif isinstance(node, (epub.Link, epub.Section)):
            points.append(NavPoint(label=node.title or "", target=node.href or ""))
        elif isinstance(node, epub.EpubHtml):
            points.append(NavPoint(label=node.title or "", target=node.get_name()))
    return points


class EbookLibPackageReader:
    """Open an EPUB archive and expose it through the package reader contract."""

    def __init__(self, book: epub.EpubBook) -> None:
        self._book = book

    @classmethod
    def open(cls, path: str | Path) -> "EbookLibPackageReader":
        source = Path(path)
        try:
            book = epub.read_epub(str(source))
        except OSError as exc:
            raise PackageIOError(source, f"Failed to open package: {exc}") from exc
        except Exception as exc:
            raise PackageParseError(source, f"Failed to parse package: {exc}") from exc
        logger.debug("Opened EPUB package %s (version=%s)", source, getattr(book, "version", None))
        return cls(book)

    def raw_metadata(self) -> list[tuple[str, str]]:
        pairs: list[tuple[str, str]] = []
        for namespace, entries in self._book.metadata.items():
            for name, values in entries.items():
                for value, attrs in values:
                    attrs = attrs or {}
                    prop = _property_name(namespace, name, attrs)
                    if not prop:
                        continue
                    text = value if value is not None else attrs.get("content", "")
                    pairs.append((prop, text or ""))
        return pairs

    def declared_title(self) -> str | None:
        for value, _attrs in self._book.get_metadata("DC", "title") or []:
            cleaned = normalize_whitespace(value or "")
            if cleaned:
                return cleaned
        return None

    def release_identifier(self) -> str | None:
        unique_id = self._unique_identifier()
        if not unique_id:
            return None
        for prop, value in self.raw_metadata():
            if prop.lower() == _MODIFIED_PROPERTY and value.strip():
                return f"{unique_id}@{value.strip()}"
        return None

    def resources(self) -> dict[str, ResourceEntry]:
        return {
            item.get_id(): ResourceEntry(path=item.get_name(), media_type=item.media_type or "")
            for item in self._book.get_items()
        }

    def reading_order(self) -> list[str]:
        order: list[str] = []
        for entry in self._book.spine:
            item_id = entry[0] if isinstance(entry, tuple) else entry
            if isinstance(item_id, epub.EpubItem):
                item_id = item_id.get_id()
            order.append(item_id)
        return order

    def navigation_tree(self) -> list[NavPoint]:
        return _nav_points(self._book.toc or [])

    def fragment_text(self, resource_id: str) -> str | None:
        item = self._book.get_item_with_id(resource_id)
        if item is None:
            return None
        raw = item.get_content()
        if raw is None:
            return None
        if isinstance(raw, str):
            return raw
        return self._decode(resource_id, raw)

    def _unique_identifier(self) -> str | None:
        identifier_id = getattr(self._book, "IDENTIFIER_ID", None)
        for value, attrs in self._book.get_metadata("DC", "identifier") or []:
            if identifier_id and (attrs or {}).get("id") == identifier_id and value and value.strip():
                return value.strip()
        return None

    def _decode(self, resource_id: str, raw: bytes) -> str | None:
        try:
            return raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass

        best = from_bytes(raw).best()
        if best is None:
            logger.warning("Skipping undecodable resource %s", resource_id)
            return None
        return str(best)
