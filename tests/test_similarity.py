# FILE: tests/test_similarity.py
"""
Tests for anchor/embeddings/similarity.py
Cosine math, stored vector parsing and ranked search.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import json
import math

import pytest

from anchor.embeddings.similarity import (
    MIN_SIMILARITY,
    DimensionMismatchError,
    collect_candidates,
    cosine_similarity,
    parse_embedding,
    search,
    serialize_embedding,
)
from conftest import make_entry


class TestCosineSimilarity:
    """Test cosine similarity computation."""

    @pytest.mark.parametrize("vec", [
        [1.0, 0.0, 0.0],
        [0.2, -0.7, 3.5],
        [1e-3, 4e-3],
        [-5.0, -5.0, -5.0, 2.0],
    ])
    def test_self_similarity_is_one(self, vec):
        assert cosine_similarity(vec, vec) == pytest.approx(1.0)

    def test_symmetry(self):
        a = [0.3, -1.2, 2.0]
        b = [1.5, 0.4, -0.9]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_scale_invariant(self):
        assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)

    def test_zero_vector_returns_zero(self):
        """Zero norm has no direction; defined as 0.0 rather than NaN."""
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0
        assert not math.isnan(cosine_similarity([0.0], [0.0]))

    def test_dimension_mismatch_raises(self):
        with pytest.raises(DimensionMismatchError) as exc_info:
            cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0])
        assert exc_info.value.len_a == 3
        assert exc_info.value.len_b == 2
        assert "3 vs 2" in str(exc_info.value)

    def test_dimension_mismatch_is_value_error(self):
        assert issubclass(DimensionMismatchError, ValueError)


class TestParseEmbedding:
    """Test stored embedding decoding."""

    def test_roundtrip(self):
        vector = [0.25, -0.5, 1.0]
        assert parse_embedding(serialize_embedding(vector)) == vector

    def test_integers_become_floats(self):
        assert parse_embedding("[1, 2, 3]") == [1.0, 2.0, 3.0]

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "not json",
        "{\"a\": 1}",
        "[]",
        "[1, \"two\", 3]",
        "[true, false]",
        "[[1, 2]]",
        "42",
        "[NaN, 1.0]",
        "[Infinity]",
        "[-Infinity, 0.5]",
        "[1e999]",
        "[" + "9" * 400 + "]",
    ])
    def test_malformed_returns_none(self, raw):
        assert parse_embedding(raw) is None


class TestCollectCandidates:
    """Test candidate collection from entries."""

    def test_skips_entries_without_embedding(self):
        entries = [
            make_entry(id=1, embedding=json.dumps([1.0, 0.0])),
            make_entry(id=2, embedding=None),
            make_entry(id=3, embedding=""),
        ]
        candidates = collect_candidates(entries)
        assert [entry.id for entry, _ in candidates] == [1]

    def test_skips_malformed_with_warning(self, caplog):
        entries = [
            make_entry(id=1, embedding="{broken"),
            make_entry(id=2, embedding=json.dumps([0.5, 0.5])),
        ]
        with caplog.at_level("WARNING"):
            candidates = collect_candidates(entries)
        assert [entry.id for entry, _ in candidates] == [2]
        assert "malformed" in caplog.text

    def test_non_finite_entry_does_not_crowd_out_matches(self):
        # Similarities to query [1, 0]: A 0.9, B 0.8, C 0.7; the NaN entry is unusable
        entries = [
            make_entry(id="A", embedding=json.dumps([0.9, math.sqrt(1 - 0.81)])),
            make_entry(id="nan", embedding="[NaN, 1.0]"),
            make_entry(id="B", embedding=json.dumps([0.8, 0.6])),
            make_entry(id="C", embedding=json.dumps([0.7, math.sqrt(1 - 0.49)])),
        ]

        candidates = collect_candidates(entries)
        results = search([1.0, 0.0], candidates, limit=3)

        assert [entry.id for entry, _ in candidates] == ["A", "B", "C"]
        assert [entry.id for entry, _ in results] == ["A", "B", "C"]
        assert all(math.isfinite(sim) for _, sim in results)


class TestSearch:
    """Test ranked search with the similarity floor."""

    def _candidates(self):
        # Similarities to query [1, 0]: 0.9, 0.5, 0.31, 0.29, 0.1
        sims = {"a": 0.9, "b": 0.5, "c": 0.31, "d": 0.29, "e": 0.1}
        return [(name, [s, math.sqrt(1 - s * s)]) for name, s in sims.items()]

    def test_sorted_descending_and_limited(self):
        results = search([1.0, 0.0], self._candidates(), limit=3)
        assert [ref for ref, _ in results] == ["a", "b", "c"]
        sims = [sim for _, sim in results]
        assert sims == sorted(sims, reverse=True)

    def test_never_exceeds_limit(self):
        for limit in (1, 2, 3, 10):
            assert len(search([1.0, 0.0], self._candidates(), limit=limit)) <= limit

    def test_floor_filters_results(self):
        results = search([1.0, 0.0], self._candidates(), limit=10)
        assert [ref for ref, _ in results] == ["a", "b", "c"]
        assert all(sim > MIN_SIMILARITY for _, sim in results)

    def test_floor_applied_after_truncation(self):
        """Truncation happens first, so fewer than limit results may come back."""
        candidates = [("low1", [0.1, 1.0]), ("low2", [0.05, 1.0]), ("high", [1.0, 0.0])]
        results = search([1.0, 0.0], candidates, limit=2)
        assert [ref for ref, _ in results] == ["high"]

    def test_ties_keep_input_order(self):
        candidates = [("first", [1.0, 0.0]), ("second", [2.0, 0.0]), ("third", [3.0, 0.0])]
        results = search([1.0, 0.0], candidates, limit=3)
        assert [ref for ref, _ in results] == ["first", "second", "third"]

    def test_empty_candidates(self):
        assert search([1.0, 0.0], [], limit=3) == []

    def test_dimension_mismatch_propagates(self):
        with pytest.raises(DimensionMismatchError):
            search([1.0, 0.0], [("bad", [1.0, 0.0, 0.0])], limit=3)

    def test_floor_constant(self):
        assert MIN_SIMILARITY == 0.3
