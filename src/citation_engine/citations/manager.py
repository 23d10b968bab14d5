"""Citation manager for accumulating sources across generation rounds.

The CitationManager is an immutable value: every mutator returns a new
manager and the receiver is never changed, so one base manager can be
shared by several reporting pipelines at once. It supports:
- Adding citations one at a time or in bulk, and merging managers
- Deduplicating by URI while keeping first-occurrence order
- Building citations from a grounding payload or a full response
- Assembling the final report with a resolved reference list
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.exceptions import CitationEngineError
from citation_engine.core.logging import get_logger
from citation_engine.citations.references import ReferenceListBuilder
from citation_engine.grounding.ingestion import GroundingIngestion
from citation_engine.grounding.selection import select_best_chunk
from citation_engine.resolution.batch import BatchResolver
from citation_engine.schemas.citations import Citation, ResolvedReference
from citation_engine.schemas.grounding import GroundingMetadata


logger = get_logger(__name__)

MARKER_PATTERN = re.compile(r"\[(\d+)\]")


class CitationManager(BaseModel):
    """Immutable, ordered accumulator of citations.

    Example:
        >>> manager = CitationManager()
        >>> updated = manager.add(Citation(uri="https://a.example", title="A"))
        >>> len(manager.citations), len(updated.citations)
        (0, 1)
    """

    model_config = ConfigDict(frozen=True)

    citations: tuple[Citation, ...] = ()

    # -------------------------------------------------------------------------
    # Transitions (all return a new manager)
    # -------------------------------------------------------------------------

    def add(self, citation: Citation) -> CitationManager:
        """Return a manager with ``citation`` appended."""
        return CitationManager(citations=(*self.citations, citation))

    def add_all(self, citations: Iterable[Citation]) -> CitationManager:
        """Return a manager with ``citations`` appended in order."""
        return CitationManager(citations=(*self.citations, *citations))

    def merge(self, other: CitationManager) -> CitationManager:
        """Return a manager holding this manager's citations, then ``other``'s."""
        return self.add_all(other.citations)

    def deduplicate(self) -> CitationManager:
        """Keep the first citation per URI; drop citations without a URI.

        Relative order of the kept citations is preserved, and applying
        this twice gives the same result as applying it once.
        """
        seen: set[str] = set()
        unique: list[Citation] = []
        for citation in self.citations:
            if not citation.uri or citation.uri in seen:
                continue
            seen.add(citation.uri)
            unique.append(citation)
        return CitationManager(citations=tuple(unique))

    def span_bound_citations(self) -> list[Citation]:
        """Return citations that carry both start and end offsets."""
        return [c for c in self.citations if c.is_span_bound]

    # -------------------------------------------------------------------------
    # Construction from grounding payloads
    # -------------------------------------------------------------------------

    @classmethod
    def from_grounding_metadata(
        cls,
        metadata: GroundingMetadata | Mapping[str, Any] | None,
    ) -> CitationManager:
        """Build span-bound citations from a grounding payload.

        Each support contributes one citation for its best chunk; supports
        with no eligible chunk contribute nothing.

        Args:
            metadata: Grounding payload, parsed or raw

        Returns:
            New manager (empty when there is nothing to ground)
        """
        grounding = GroundingIngestion().ingest(metadata)
        if grounding is None:
            return cls()

        citations: list[Citation] = []
        for support in grounding.supports:
            best = select_best_chunk(support, grounding.chunks)
            if best is None:
                continue
            chunk = grounding.chunks[best]
            citations.append(
                Citation(
                    uri=chunk.uri,
                    title=chunk.title,
                    start_index=support.span.start,
                    end_index=support.span.end,
                )
            )

        if citations:
            logger.info("Extracted citations from grounding metadata", count=len(citations))
        return cls(citations=tuple(citations))

    @classmethod
    def from_response(cls, response: Mapping[str, Any] | None) -> CitationManager:
        """Build citations from a full generation response.

        Never raises: extraction failures are logged and yield an empty manager.
        """
        try:
            metadata = GroundingIngestion().extract_metadata(response)
            return cls.from_grounding_metadata(metadata)
        except (CitationEngineError, ValidationError) as e:
            logger.error("Failed to extract citations from response", error=str(e))
            return cls()

    # -------------------------------------------------------------------------
    # Report assembly
    # -------------------------------------------------------------------------

    def _processed_order(self, text: str) -> list[Citation]:
        """Order citations for the reference list.

        Markers ``[1]..[max_n]`` already present in the text claim the first
        ``max_n`` unique citations, then span-bound citations follow, then
        everything else.
        """
        unique = list(self.deduplicate().citations)
        processed: list[Citation] = []
        seen: set[str] = set()

        def take(citation: Citation) -> None:
            if citation.uri and citation.uri not in seen:
                seen.add(citation.uri)
                processed.append(citation)

        markers = [int(m.group(1)) for m in MARKER_PATTERN.finditer(text)]
        if markers:
            for citation in unique[: max(markers)]:
                take(citation)

        for citation in self.span_bound_citations():
            take(citation)
        for citation in unique:
            take(citation)
        return processed

    async def assemble_report(
        self,
        text: str,
        resolver: BatchResolver | None = None,
        builder: ReferenceListBuilder | None = None,
        settings: Settings | None = None,
    ) -> str:
        """Append a resolved reference list to ``text``.

        Args:
            text: Report text, possibly containing ``[n]`` markers
            resolver: Batch resolver. A settings-configured one is created
                (and closed) when omitted.
            builder: Reference list builder. Defaults to settings style.
            settings: Application settings. Uses get_settings() if not provided.

        Returns:
            ``text`` with the reference section appended, or ``text``
            unchanged when there are no citations with a URI
        """
        settings = settings or get_settings()
        processed = self._processed_order(text)
        if not processed:
            logger.warning("No citations to report, returning text unchanged")
            return text

        logger.info(
            "Assembling citation report",
            citations=len(self.citations),
            unique=len(processed),
        )

        urls = [c.uri for c in processed if c.uri]
        if resolver is None:
            async with BatchResolver.from_settings(settings) as owned:
                resolved = await owned.resolve_all(urls)
        else:
            resolved = await resolver.resolve_all(urls)

        references = [
            ResolvedReference(
                original_uri=c.uri,
                resolved_uri=resolved.get(c.uri) or c.uri,
                title=c.title or settings.default_reference_title,
            )
            for c in processed
            if c.uri
        ]
        builder = builder or ReferenceListBuilder(settings=settings)
        return builder.append_to(text, references)


__all__ = [
    "CitationManager",
    "MARKER_PATTERN",
]
