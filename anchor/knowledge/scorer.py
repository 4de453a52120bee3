# FILE: anchor/knowledge/scorer.py
"""
Keyword relevance scorer.

Deterministic, explainable ranking of knowledge entries by lexical overlap
with the query plus category boosts. No external calls. Independent of the
semantic search path; used by the admin keyword search endpoint and usable
as a fallback when no embedding provider is reachable.

Scoring per query token (lowercased, surrounding punctuation trimmed,
tokens shorter than 3 chars dropped):
    +10  title contains token
    +8   any keyword contains token
    +3   content contains token

Category boosts come from a data-driven rule table: when the lowercased
query contains any trigger substring, entries in the rule's category get
the rule's bonus. The packaged table lives in category_boosts.json and can
be replaced with ANCHOR_CATEGORY_BOOSTS_PATH.
"""

import json
import logging
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from anchor import config

logger = logging.getLogger(__name__)

TITLE_MATCH_SCORE = 10
KEYWORD_MATCH_SCORE = 8
CONTENT_MATCH_SCORE = 3
MIN_TOKEN_LENGTH = 3

DEFAULT_BOOSTS_PATH = Path(__file__).with_name("category_boosts.json")


@dataclass(frozen=True)
class CategoryBoostRule:
    """If the query mentions any trigger, entries in `category` gain `bonus`."""
    triggers: Tuple[str, ...]
    category: str
    bonus: int

    def applies_to(self, query_lower: str, category: str) -> bool:
        if category.lower() != self.category.lower():
            return False
        return any(trigger in query_lower for trigger in self.triggers)


def load_boost_rules(path: Optional[Path] = None) -> List[CategoryBoostRule]:
    """Load a rule table: a JSON list of {triggers, category, bonus} objects."""
    raw = json.loads(Path(path or DEFAULT_BOOSTS_PATH).read_text(encoding="utf-8"))
    rules = []
    for item in raw:
        rules.append(CategoryBoostRule(
            triggers=tuple(t.lower() for t in item["triggers"]),
            category=item["category"],
            bonus=int(item["bonus"]),
        ))
    return rules


_boost_rules: Optional[List[CategoryBoostRule]] = None


def get_boost_rules() -> List[CategoryBoostRule]:
    """Get the process-wide rule table (configured path, else the packaged one)."""
    global _boost_rules
    if _boost_rules is None:
        path = Path(config.CATEGORY_BOOSTS_PATH) if config.CATEGORY_BOOSTS_PATH else None
        _boost_rules = load_boost_rules(path)
        logger.debug("[knowledge] Loaded %d category boost rules", len(_boost_rules))
    return _boost_rules


def tokenize(query: str) -> List[str]:
    tokens = []
    for raw in query.lower().split():
        token = raw.strip(string.punctuation)
        if len(token) >= MIN_TOKEN_LENGTH:
            tokens.append(token)
    return tokens


def score_entry(
    query: str,
    entry: Any,
    rules: Optional[Sequence[CategoryBoostRule]] = None,
) -> int:
    """Score one entry (anything with title/content/keywords/category attributes)."""
    query_lower = query.lower()
    title = (entry.title or "").lower()
    content = (entry.content or "").lower()
    keywords = [k.lower() for k in (entry.keywords or [])]

    score = 0
    for token in tokenize(query):
        if token in title:
            score += TITLE_MATCH_SCORE
        if any(token in k for k in keywords):
            score += KEYWORD_MATCH_SCORE
        if token in content:
            score += CONTENT_MATCH_SCORE

    for rule in (get_boost_rules() if rules is None else rules):
        if rule.applies_to(query_lower, entry.category or ""):
            score += rule.bonus

    return score


def score_entries_with_scores(
    query: str,
    entries: Iterable[Any],
    limit: int = 3,
    rules: Optional[Sequence[CategoryBoostRule]] = None,
) -> List[Tuple[Any, int]]:
    """Rank entries by score; drops non-positive scores; ties keep input order."""
    scored = [(entry, score_entry(query, entry, rules)) for entry in entries]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]


def score_entries(
    query: str,
    entries: Iterable[Any],
    limit: int = 3,
    rules: Optional[Sequence[CategoryBoostRule]] = None,
) -> List[Any]:
    return [entry for entry, _ in score_entries_with_scores(query, entries, limit, rules)]
