"""Grounding quality summary for a generated text."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from citation_engine.core.config import Settings, get_settings
from citation_engine.grounding.ingestion import parse_metadata
from citation_engine.schemas.grounding import GroundingMetadata


class GroundingReport:
    """Summarize how well a text is grounded.

    Attributes:
        text: The generated text
        metadata: Its grounding payload
    """

    def __init__(
        self,
        text: str,
        metadata: GroundingMetadata | Mapping[str, Any],
        settings: Settings | None = None,
    ) -> None:
        """Initialize the report.

        Raises:
            GroundingValidationError: If ``metadata`` does not match the schema
        """
        self.text = text
        self.metadata = parse_metadata(metadata)
        self._settings = settings or get_settings()

    def grounding_score(self) -> float:
        """Mean of every confidence score across all supports.

        Missing score entries count as 0. Returns 0.0 when no support has scores.
        """
        scores = [
            score or 0.0
            for support in self.metadata.grounding_supports or []
            for score in support.confidence_scores or []
        ]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    def has_grounding(self, threshold: float | None = None) -> bool:
        """Return True when the mean confidence reaches ``threshold``.

        Args:
            threshold: Minimum score. Defaults to settings.grounding_threshold.
        """
        if threshold is None:
            threshold = self._settings.grounding_threshold
        return self.grounding_score() >= threshold

    def grounding_urls(self) -> list[str]:
        """Chunk URIs in chunk order, skipping chunks without one."""
        return [
            chunk.web.uri
            for chunk in self.metadata.grounding_chunks or []
            if chunk.web is not None and chunk.web.uri
        ]


__all__ = [
    "GroundingReport",
]
