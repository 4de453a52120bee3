# FILE: tests/test_keyword_scorer.py
"""
Tests for anchor/knowledge/scorer.py
Keyword relevance scoring and category boost rules.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import json

import pytest
from unittest.mock import patch

from anchor.knowledge import scorer
from anchor.knowledge.scorer import (
    CONTENT_MATCH_SCORE,
    KEYWORD_MATCH_SCORE,
    TITLE_MATCH_SCORE,
    CategoryBoostRule,
    load_boost_rules,
    score_entries,
    score_entries_with_scores,
    score_entry,
    tokenize,
)
from conftest import make_entry


@pytest.fixture
def corpus():
    return [
        make_entry(id=1),
        make_entry(
            id=2,
            expert="Dr. Xavier Amador",
            source="LEAP Institute",
            category="communication",
            title="LEAP Method for Communication",
            content="Listen, Empathize, Agree, Partner when a loved one refuses treatment.",
            keywords=["leap", "communication", "refusal"],
        ),
        make_entry(
            id=3,
            expert="NAMI",
            source="NAMI Family-to-Family",
            category="recovery",
            title="Recovery Is Possible",
            content="Many people with schizophrenia lead meaningful lives.",
            keywords=["hope", "recovery"],
        ),
    ]


class TestTokenize:
    """Test query tokenization."""

    def test_short_tokens_dropped(self):
        assert tokenize("is it ok") == []

    def test_lowercase_and_punctuation(self):
        assert tokenize("What is Clozapine?") == ["what", "clozapine"]

    def test_three_char_tokens_kept(self):
        assert tokenize("THC use") == ["thc", "use"]


class TestScoreEntry:
    """Test per-entry scoring."""

    def test_title_keyword_content_weights(self):
        entry = make_entry(
            title="alpha", keywords=["alpha"], content="alpha", category="none",
        )
        assert score_entry("alpha", entry, rules=[]) == (
            TITLE_MATCH_SCORE + KEYWORD_MATCH_SCORE + CONTENT_MATCH_SCORE
        )

    def test_keyword_substring_match(self):
        entry = make_entry(title="x", keywords=["medication adherence"], content="y", category="none")
        assert score_entry("adherence", entry, rules=[]) == KEYWORD_MATCH_SCORE

    def test_summed_over_tokens(self):
        entry = make_entry(title="clozapine treatment", keywords=[], content="", category="none")
        assert score_entry("clozapine treatment", entry, rules=[]) == 2 * TITLE_MATCH_SCORE

    def test_clozapine_title_plus_category_boost(self):
        entry = make_entry()
        score = score_entry("What is Clozapine?", entry)
        assert score >= TITLE_MATCH_SCORE + 15

    def test_short_tokens_never_match_lexically(self):
        entry = make_entry(title="is it ok", keywords=["ok"], content="is it ok", category="none")
        assert score_entry("is it ok", entry, rules=[]) == 0

    def test_missing_fields(self):
        entry = make_entry(title=None, content=None, keywords=None, category=None)
        assert score_entry("clozapine", entry) == 0


class TestCategoryBoostRule:
    """Test boost rule matching."""

    def test_applies_on_trigger_and_category(self):
        rule = CategoryBoostRule(triggers=("cannabis", "weed"), category="cannabis", bonus=15)
        assert rule.applies_to("is weed harmful", "cannabis")
        assert rule.applies_to("is weed harmful", "Cannabis")
        assert not rule.applies_to("is weed harmful", "recovery")
        assert not rule.applies_to("is coffee harmful", "cannabis")

    def test_multi_word_trigger_matches_untokenized_query(self):
        rules = [CategoryBoostRule(triggers=("doesn't believe",), category="anosognosia", bonus=15)]
        entry = make_entry(title="x", keywords=[], content="", category="anosognosia")
        assert score_entry("My son doesn't believe he is sick", entry, rules=rules) == 15

    def test_multiple_rules_stack(self):
        rules = [
            CategoryBoostRule(triggers=("leap",), category="communication", bonus=15),
            CategoryBoostRule(triggers=("refuse",), category="communication", bonus=5),
        ]
        entry = make_entry(title="x", keywords=[], content="", category="communication")
        assert score_entry("leap refuse", entry, rules=rules) == 20


class TestLoadBoostRules:
    """Test the data-driven rule table."""

    def test_packaged_rules(self):
        rules = load_boost_rules()
        categories = {rule.category for rule in rules}
        assert {"clozapine", "cannabis", "communication", "anosognosia", "recovery", "symptoms", "legal"} <= categories
        clozapine = [rule for rule in rules if rule.category == "clozapine"]
        assert clozapine[0].bonus == 15
        assert "clozapine" in clozapine[0].triggers

    def test_custom_rule_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([
            {"triggers": ["Housing"], "category": "housing", "bonus": 7},
        ]))
        rules = load_boost_rules(path)
        assert rules == [CategoryBoostRule(triggers=("housing",), category="housing", bonus=7)]

    def test_configured_path_used(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps([{"triggers": ["x"], "category": "y", "bonus": 1}]))
        with patch.object(scorer, "_boost_rules", None), \
             patch.object(scorer.config, "CATEGORY_BOOSTS_PATH", str(path)):
            rules = scorer.get_boost_rules()
        assert [rule.category for rule in rules] == ["y"]


class TestScoreEntries:
    """Test ranking."""

    def test_clozapine_ranked_first(self, corpus):
        results = score_entries_with_scores("What is Clozapine?", corpus, limit=3)
        entry, score = results[0]
        assert entry.title == "Clozapine as Gold Standard Treatment"
        assert score >= 25

    def test_no_lexical_match(self, corpus):
        assert score_entries("is it ok", corpus, limit=3, rules=[]) == []

    def test_zero_scores_dropped(self, corpus):
        results = score_entries("clozapine", corpus, limit=10, rules=[])
        assert [entry.id for entry in results] == [1]

    def test_limit(self, corpus):
        results = score_entries("treatment", corpus, limit=1, rules=[])
        assert len(results) == 1

    def test_sorted_descending(self, corpus):
        results = score_entries_with_scores("leap communication recovery", corpus, limit=3)
        scores = [score for _, score in results]
        assert scores == sorted(scores, reverse=True)
        assert results[0][0].id == 2

    def test_ties_keep_input_order(self):
        entries = [
            make_entry(id=10, title="hope", keywords=[], content="", category="none"),
            make_entry(id=11, title="hope", keywords=[], content="", category="none"),
        ]
        assert [e.id for e in score_entries("hope", entries, limit=3, rules=[])] == [10, 11]
