"""Grounding payload ingestion.

Validates a grounding payload and normalizes it into a GroundingInput.
Anything unusable (no chunks, no supports, unparseable payload) makes the
pipeline a no-op: ``ingest`` returns None and the caller hands the text back
unchanged. That is the documented "nothing to ground" outcome, not an error.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from citation_engine.core.exceptions import GroundingValidationError
from citation_engine.core.logging import Logger, get_logger
from citation_engine.schemas.grounding import (
    GroundingInput,
    GroundingMetadata,
    GroundingSupport,
    SourceChunk,
    Span,
    Support,
)


def parse_metadata(payload: GroundingMetadata | Mapping[str, Any]) -> GroundingMetadata:
    """Parse a raw grounding payload.

    Args:
        payload: Metadata model or its mapping form (camelCase or snake_case)

    Returns:
        Parsed GroundingMetadata

    Raises:
        GroundingValidationError: If the payload does not match the schema
    """
    if isinstance(payload, GroundingMetadata):
        return payload
    try:
        return GroundingMetadata.model_validate(payload)
    except ValidationError as e:
        raise GroundingValidationError(
            "Grounding metadata does not match the expected schema",
            field="metadata",
            value=payload,
            cause=e,
        ) from e


class GroundingIngestion:
    """Validate and normalize grounding payloads.

    Example:
        >>> ingestion = GroundingIngestion()
        >>> ingestion.ingest({"groundingChunks": [], "groundingSupports": []}) is None
        True
    """

    def __init__(self, logger: Logger | None = None) -> None:
        """Initialize ingestion.

        Args:
            logger: Structured logger. Defaults to the module logger.
        """
        self._logger = logger or get_logger(__name__)

    def ingest(
        self,
        metadata: GroundingMetadata | Mapping[str, Any] | None,
    ) -> GroundingInput | None:
        """Validate a payload and normalize it.

        Args:
            metadata: Grounding payload, parsed or raw

        Returns:
            GroundingInput, or None when there is nothing to ground
        """
        if metadata is None:
            self._logger.info("No grounding metadata supplied")
            return None

        try:
            parsed = parse_metadata(metadata)
        except GroundingValidationError as e:
            self._logger.warning(
                "Ignoring malformed grounding metadata",
                field=e.field,
                error=str(e.cause),
            )
            return None

        raw_chunks = parsed.grounding_chunks or []
        raw_supports = parsed.grounding_supports or []
        if not raw_chunks or not raw_supports:
            self._logger.info(
                "Grounding metadata has nothing to ground",
                chunks=len(raw_chunks),
                supports=len(raw_supports),
            )
            return None

        chunks = tuple(
            SourceChunk(
                index=i,
                uri=chunk.web.uri if chunk.web else None,
                title=chunk.web.title if chunk.web else None,
            )
            for i, chunk in enumerate(raw_chunks)
        )

        supports: list[Support] = []
        for raw in raw_supports:
            support = self._normalize_support(raw)
            if support is not None:
                supports.append(support)

        skipped = len(raw_supports) - len(supports)
        if skipped:
            self._logger.info("Skipped supports without span or candidates", skipped=skipped)

        return GroundingInput(chunks=chunks, supports=tuple(supports))

    @staticmethod
    def _normalize_support(raw: GroundingSupport) -> Support | None:
        """Normalize one support, or return None when it cannot be used.

        Producers omit ``startIndex`` when it is 0, so a segment with only
        an end offset starts at the beginning of the text. Null candidate
        entries are dropped together with their positional score.
        """
        segment = raw.segment
        if segment is None or segment.end_index is None:
            return None
        start = segment.start_index if segment.start_index is not None else 0

        raw_scores = raw.confidence_scores
        candidates: list[int] = []
        scores: list[float | None] = []
        for position, index in enumerate(raw.grounding_chunk_indices or []):
            if index is None:
                continue
            candidates.append(index)
            if raw_scores is not None:
                scores.append(raw_scores[position] if position < len(raw_scores) else None)
        if not candidates:
            return None

        return Support(
            span=Span(start=start, end=segment.end_index),
            candidate_chunk_indices=tuple(candidates),
            confidence_scores=tuple(scores) if raw_scores is not None else None,
        )

    def extract_metadata(self, response: Mapping[str, Any] | None) -> GroundingMetadata | None:
        """Pull grounding metadata out of a full generation response.

        Looks at ``candidates[0].groundingMetadata`` first, then at a
        top-level ``groundingMetadata``.

        Args:
            response: Generation response as a mapping

        Returns:
            Parsed metadata, or None when the response carries none or it is malformed
        """
        if not isinstance(response, Mapping):
            return None

        raw: Any = None
        candidates = response.get("candidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], Mapping):
            raw = candidates[0].get("groundingMetadata") or candidates[0].get("grounding_metadata")
        if raw is None:
            raw = response.get("groundingMetadata") or response.get("grounding_metadata")
        if raw is None:
            return None

        try:
            return parse_metadata(raw)
        except GroundingValidationError as e:
            self._logger.warning("Ignoring malformed grounding metadata in response", error=str(e.cause))
            return None


__all__ = [
    "GroundingIngestion",
    "parse_metadata",
]
