"""Text helpers shared by the providers' catalog filters."""

from __future__ import annotations

import re
import unicodedata


def normalize_text(text: str) -> str:
    """Normalize unicode, collapse whitespace, strip."""
    text = unicodedata.normalize("NFKC", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def searchable_text(*parts: object) -> str:
    """Lowercased, space-joined text of the non-empty parts."""
    return " ".join(str(p) for p in parts if p).lower()


def matches_query(query: str, *parts: object) -> bool:
    """Case-insensitive substring match of the whole query against the parts."""
    return query.lower() in searchable_text(*parts)


def slugify(text: str) -> str:
    """Stable id fragment for catalog entries: 'Damaged Helmet' -> 'damaged-helmet'."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-zA-Z0-9]+", "-", text).strip("-").lower()
    return text or "item"


def strip_markup(text: str) -> str:
    """Drop inline HTML tags (search-match highlights) and normalize whitespace."""
    return normalize_text(re.sub(r"<[^>]+>", "", text))
