# FILE: anchor/embeddings/similarity.py
"""
Vector similarity: cosine math, stored-vector parsing and ranked search.

Pure functions, no I/O. Embeddings are stored as JSON-encoded float arrays
on the knowledge entry; anything that does not parse into a non-empty list
of numbers is treated as "no embedding" and left out of search.
"""

import json
import logging
import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

# Search floor: results at or below this are never returned by search().
# Not the routing cut-off, see anchor.retrieval.routing.CONFIDENCE_THRESHOLD.
MIN_SIMILARITY = 0.3

Vector = List[float]
T = TypeVar("T")


class DimensionMismatchError(ValueError):
    """Vectors of different length were compared (mixed embedding models)."""

    def __init__(self, len_a: int, len_b: int):
        super().__init__(
            f"Cannot compare embeddings of different dimensions: {len_a} vs {len_b}"
        )
        self.len_a = len_a
        self.len_b = len_b


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Raises DimensionMismatchError on unequal lengths. A zero-norm vector
    has no direction; its similarity to anything is defined as 0.0.
    """
    if len(vec_a) != len(vec_b):
        raise DimensionMismatchError(len(vec_a), len(vec_b))

    dot_product = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


def serialize_embedding(vector: Sequence[float]) -> str:
    return json.dumps([float(v) for v in vector])


def parse_embedding(raw: Optional[str]) -> Optional[Vector]:
    """Decode a stored embedding; None if absent or malformed."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, list) or not data:
        return None
    vector = []
    for value in data:
        # bool is an int subclass; a list of flags is not an embedding
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        try:
            number = float(value)
        except OverflowError:
            return None
        # json.loads accepts NaN and Infinity
        if not math.isfinite(number):
            return None
        vector.append(number)
    return vector


def collect_candidates(entries: Iterable[Any]) -> List[Tuple[Any, Vector]]:
    """
    Pair each entry with its parsed embedding.

    Entries without an embedding are skipped silently; entries whose stored
    embedding is corrupt are skipped with a warning.
    """
    candidates = []
    for entry in entries:
        raw = getattr(entry, "embedding", None)
        if not raw:
            continue
        vector = parse_embedding(raw)
        if vector is None:
            logger.warning(
                "[embeddings] Ignoring malformed stored embedding for entry %s",
                getattr(entry, "id", "?"),
            )
            continue
        candidates.append((entry, vector))
    return candidates


def search(
    query_vector: Sequence[float],
    candidates: Iterable[Tuple[T, Sequence[float]]],
    limit: int = 3,
) -> List[Tuple[T, float]]:
    """
    Rank candidates by cosine similarity to the query.

    Sorts descending (ties keep input order), truncates to `limit`, then
    drops results that do not clear MIN_SIMILARITY. May return fewer than
    `limit` results. Raises DimensionMismatchError if any candidate's
    dimensionality differs from the query's.
    """
    scored = [(ref, cosine_similarity(query_vector, vector)) for ref, vector in candidates]
    scored.sort(key=lambda item: item[1], reverse=True)
    top = scored[:limit]
    return [(ref, sim) for ref, sim in top if sim > MIN_SIMILARITY]
