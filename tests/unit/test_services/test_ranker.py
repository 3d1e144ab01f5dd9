"""Unit tests for relevance scoring and ranking."""

from __future__ import annotations

import pytest

from cosmos_engine.models.schemas import Record
from cosmos_engine.services.ranker import MAX_RESULTS, calculate_relevance, rank_records


def test_full_and_word_match():
    record = Record(id="a", name="Damaged Helmet")
    assert calculate_relevance("helmet", record) == pytest.approx(0.8)
    assert calculate_relevance("helmet", record) >= 0.5


def test_partial_word_match_shares_budget():
    record = Record(id="a", name="Red bike", description="a fast one")
    # "red car" is not a substring; only "red" of two words matches
    assert calculate_relevance("red car", record) == pytest.approx(0.15)


def test_no_match_scores_zero():
    assert calculate_relevance("submarine", Record(id="a", name="Lantern")) == 0.0


def test_match_is_case_insensitive_and_uses_description():
    record = Record(id="a", name="Boom Box", description="Retro STEREO speaker")
    assert calculate_relevance("stereo", record) == pytest.approx(0.8)


def test_trailing_space_yields_empty_word_match():
    record = Record(id="a", name="Lantern")
    # "zzz " splits into ["zzz", ""]; the empty word is found in any text
    assert calculate_relevance("zzz ", record) == pytest.approx(0.15)


def test_rank_sorted_descending_within_unit_interval(sample_records):
    ranked = rank_records(sample_records, "helmet")
    scores = [r.relevance for r in ranked]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= s <= 1.0 for s in scores)
    assert [r.id for r in ranked[:2]] == ["gallery-damaged-helmet", "objaverse-helmet-001"]


def test_rank_is_stable_for_ties():
    records = [Record(id=f"r{i}", name=f"Helmet {i}") for i in range(10)]
    ranked = rank_records(records, "helmet")
    assert [r.id for r in ranked] == [f"r{i}" for i in range(10)]


def test_rank_truncates_to_limit():
    records = [Record(id=f"r{i}", name="thing" if i % 2 else "other") for i in range(250)]
    ranked = rank_records(records, "thing")
    assert len(ranked) == MAX_RESULTS == 100
    assert all(r.name == "thing" for r in ranked)
    assert len(rank_records(records, "thing", limit=5)) == 5


def test_rank_keeps_record_fields(sample_records):
    ranked = rank_records(sample_records, "lantern")
    top = ranked[0]
    assert top.id == "gallery-lantern"
    assert top.source_tag == "content-gallery"
    assert top.record_type == "artwork"


def test_rank_empty_input():
    assert rank_records([], "anything") == []


@pytest.mark.parametrize("query", ["untitled", "title", "tit"])
def test_nameless_record_is_not_scored_on_placeholder(query):
    nameless = Record.model_validate({"id": "x"})
    assert calculate_relevance(query, nameless) == 0.0


def test_title_is_not_scored():
    record = Record.model_validate({"id": "x", "title": "Boom Box"})
    assert calculate_relevance("boom", record) == 0.0
    assert calculate_relevance("boom", Record(id="y", name="Boom Box")) == pytest.approx(0.8)
