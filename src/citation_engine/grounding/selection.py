"""Best-chunk selection for a single support.

Pure functions, no I/O and no logging.
"""

from __future__ import annotations

from collections.abc import Sequence

from citation_engine.schemas.grounding import SourceChunk, Support


def _is_eligible(index: int, chunks: Sequence[SourceChunk]) -> bool:
    return 0 <= index < len(chunks) and chunks[index].is_usable


def select_best_chunk(
    support: Support,
    chunks: Sequence[SourceChunk],
) -> int | None:
    """Pick the chunk that best backs ``support``.

    With confidence scores, candidates are scanned positionally and the
    winner only changes on a strictly higher score, so ties keep the
    earliest candidate. A missing score entry counts as 0. Without scores
    the first eligible candidate wins. A candidate is eligible only when its
    chunk exists and has a URI.

    Args:
        support: The support to resolve
        chunks: All chunks of the payload, indexed by position

    Returns:
        Index of the winning chunk, or None when no candidate is eligible

    Example:
        >>> from citation_engine.schemas.grounding import Span
        >>> chunks = [SourceChunk(index=0, uri="https://a"), SourceChunk(index=1, uri="https://b")]
        >>> support = Support(
        ...     span=Span(start=0, end=4),
        ...     candidate_chunk_indices=(0, 1),
        ...     confidence_scores=(0.4, 0.9),
        ... )
        >>> select_best_chunk(support, chunks)
        1
    """
    candidates = support.candidate_chunk_indices
    scores = support.confidence_scores

    if not scores:
        for index in candidates:
            if _is_eligible(index, chunks):
                return index
        return None

    best_index: int | None = None
    best_score = float("-inf")

    for position, index in enumerate(candidates):
        if not _is_eligible(index, chunks):
            continue
        score = scores[position] if position < len(scores) else None
        score = score or 0.0
        if score > best_score:
            best_index = index
            best_score = score

    return best_index


__all__ = [
    "select_best_chunk",
]
