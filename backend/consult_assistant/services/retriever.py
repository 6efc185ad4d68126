"""Cosine-similarity ranking over cached passages."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from consult_assistant.models.rag import IndexedPassage, RetrievalResult

logger = logging.getLogger(__name__)

# Score given to zero-magnitude vectors: ranks below every real similarity.
LOWEST_SIMILARITY = float("-inf")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """dot(a, b) / (|a| * |b|), clamped to [-1, 1].

    Returns ``LOWEST_SIMILARITY`` instead of NaN when either vector has zero
    magnitude.

    Raises:
        ValueError: if the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length ({len(a)} != {len(b)})")
    norm_a = math.hypot(*a)
    norm_b = math.hypot(*b)
    if norm_a == 0.0 or norm_b == 0.0:
        return LOWEST_SIMILARITY
    dot = math.fsum(x * y for x, y in zip(a, b))
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))


def retrieve(
    query_vector: Sequence[float],
    passages: Sequence[IndexedPassage],
    top_k: int = 5,
) -> list[RetrievalResult]:
    """Rank ``passages`` by similarity to ``query_vector``, best first.

    Equal scores keep the order of ``passages`` (the sort is stable).
    Returns at most ``top_k`` results; an empty store gives ``[]``.
    """
    if top_k <= 0 or not passages:
        return []

    scored: list[tuple[float, IndexedPassage]] = []
    for passage in passages:
        if len(passage.vector) != len(query_vector):
            logger.warning(
                "Skipping passage %s: %d-dim vector vs %d-dim query",
                passage.record_id,
                len(passage.vector),
                len(query_vector),
            )
            continue
        scored.append((cosine_similarity(query_vector, passage.vector), passage))

    scored.sort(key=lambda item: item[0], reverse=True)

    results = [
        RetrievalResult(passage=passage, score=score, source_id=idx + 1)
        for idx, (score, passage) in enumerate(scored[:top_k])
    ]
    for r in results:
        logger.debug(
            "  Result [%d] score=%.3f record=%s",
            r.source_id,
            r.score,
            r.passage.record_id,
        )
    return results
