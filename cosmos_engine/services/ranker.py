"""Query relevance scoring and result truncation."""

from __future__ import annotations

import re
from collections.abc import Iterable

from cosmos_engine.models.schemas import RankedRecord, Record

MAX_RESULTS = 100
FULL_MATCH_SCORE = 0.5
WORD_MATCH_BUDGET = 0.3

_WHITESPACE = re.compile(r"\s+")


def calculate_relevance(query: str, record: Record) -> float:
    """Score in [0, 1]: 0.5 for the whole query, plus 0.3 shared across its words.

    The query is split on whitespace runs without stripping first, so a
    leading or trailing space produces an empty word that always matches.
    Only the record's own name and description are scored; a nameless record
    is not matched through its title or the "Untitled" placeholder.
    """
    query_lower = query.lower()
    text = f"{record.name or ''} {record.description or ''}".lower()

    score = 0.0
    if query_lower in text:
        score += FULL_MATCH_SCORE

    words = _WHITESPACE.split(query_lower)
    for word in words:
        if word in text:
            score += WORD_MATCH_BUDGET / len(words)

    return max(0.0, min(score, 1.0))


def rank_records(
    records: Iterable[Record],
    query: str,
    limit: int = MAX_RESULTS,
) -> list[RankedRecord]:
    """Score, stable-sort descending and keep the top `limit` records."""
    ranked = [RankedRecord.from_record(r, calculate_relevance(query, r)) for r in records]
    # sorted() is stable with reverse=True, so aggregator order breaks ties
    ranked = sorted(ranked, key=lambda r: r.relevance, reverse=True)
    return ranked[: max(limit, 0)]
