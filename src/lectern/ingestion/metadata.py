"""Reduce raw, inconsistently prefixed package metadata to a fixed record."""

from __future__ import annotations

from typing import Iterable, Sequence

from lectern.ingestion.models import BookMetadata

IDENTIFIER_KEYS = ("identifier",)
TITLE_KEYS = ("title",)
AUTHOR_KEYS = ("creator", "author")
LANGUAGE_KEYS = ("language",)
DESCRIPTION_KEYS = ("description", "abstract")


def property_matches(prop: str, keys: Iterable[str]) -> bool:
    """True when ``prop`` equals a key or ends with ``:<key>``, ignoring case."""

    prop = prop.lower()
    for key in keys:
        key = key.lower()
        if prop == key or prop.endswith(f":{key}"):
            return True
    return False


def metadata_value(pairs: Sequence[tuple[str, str]], keys: Sequence[str]) -> str | None:
    """Return the first non-blank value whose property matches one of ``keys``."""

    for prop, value in pairs:
        if not property_matches(prop, keys):
            continue
        cleaned = (value or "").strip()
        if cleaned:
            return cleaned
    return None


def collect_metadata_values(pairs: Sequence[tuple[str, str]], keys: Sequence[str]) -> list[str]:
    """Return all matching values, trimmed and deduplicated case-insensitively in first-seen order."""

    values: list[str] = []
    seen: set[str] = set()
    for prop, value in pairs:
        if not property_matches(prop, keys):
            continue
        cleaned = (value or "").strip()
        if not cleaned:
            continue
        folded = cleaned.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        values.append(cleaned)
    return values


def normalize_metadata(
    pairs: Sequence[tuple[str, str]],
    *,
    declared_title: str | None = None,
    release_identifier: str | None = None,
) -> BookMetadata:
    identifier = metadata_value(pairs, IDENTIFIER_KEYS) or _blank_to_none(release_identifier)
    title = _blank_to_none(declared_title) or metadata_value(pairs, TITLE_KEYS)

    return BookMetadata(
        identifier=identifier,
        title=title,
        authors=collect_metadata_values(pairs, AUTHOR_KEYS),
        language=metadata_value(pairs, LANGUAGE_KEYS),
        description=metadata_value(pairs, DESCRIPTION_KEYS),
    )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None
