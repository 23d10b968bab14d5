"""Grounding pipeline: annotate text with citations and a reference list.

Flow:
    GroundingIngestion -> select_best_chunk (per support)
    -> BatchResolver (throttled redirect resolution of winning URLs)
    -> SegmentAnnotator (inline markers) -> ReferenceListBuilder

Citation enrichment is best-effort. Every failure class degrades to a safe
default, and in the worst case the original text comes back unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from citation_engine.annotation.annotator import Edit, SegmentAnnotator, format_inline_citation
from citation_engine.citations.references import ReferenceListBuilder
from citation_engine.core.config import Settings, get_settings
from citation_engine.core.exceptions import CitationEngineError
from citation_engine.core.logging import Logger, get_logger
from citation_engine.grounding.ingestion import GroundingIngestion
from citation_engine.grounding.selection import select_best_chunk
from citation_engine.resolution.batch import BatchResolver
from citation_engine.schemas.citations import ResolvedReference
from citation_engine.schemas.grounding import (
    GroundingInput,
    GroundingMetadata,
    SourceChunk,
    Support,
)


@dataclass
class GroundingResult:
    """Output of one pipeline run.

    Attributes:
        text: Annotated text with the reference section appended
        references: References in display order (empty when nothing was grounded)
    """

    text: str
    references: list[ResolvedReference] = field(default_factory=list)


@dataclass(frozen=True)
class _Selection:
    support: Support
    chunk: SourceChunk


class GroundingProcessor:
    """Run the full grounding pipeline over one text.

    Example:
        ```python
        async with BatchResolver.from_settings() as resolver:
            processor = GroundingProcessor(resolver=resolver)
            annotated = await processor.process(text, metadata)
        ```
    """

    def __init__(
        self,
        resolver: BatchResolver | None = None,
        *,
        annotator: SegmentAnnotator | None = None,
        builder: ReferenceListBuilder | None = None,
        ingestion: GroundingIngestion | None = None,
        settings: Settings | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            resolver: Batch resolver for source URLs. When omitted a
                settings-configured one is created per run and closed after.
            annotator: Segment annotator
            builder: Reference list builder
            ingestion: Payload ingestion
            settings: Application settings. Uses get_settings() if not provided.
            logger: Structured logger. Defaults to the module logger.
        """
        self._settings = settings or get_settings()
        self._logger = logger or get_logger(__name__)
        self._resolver = resolver
        self._annotator = annotator or SegmentAnnotator(logger=self._logger)
        self._builder = builder or ReferenceListBuilder(settings=self._settings)
        self._ingestion = ingestion or GroundingIngestion(logger=self._logger)

    async def process(
        self,
        text: str,
        metadata: GroundingMetadata | Mapping[str, Any] | None,
    ) -> str:
        """Annotate ``text`` and append its reference list.

        Returns:
            The rewritten text, or ``text`` unchanged when there is nothing
            to ground or the pipeline fails
        """
        result = await self.run(text, metadata)
        return result.text

    async def run(
        self,
        text: str,
        metadata: GroundingMetadata | Mapping[str, Any] | None,
    ) -> GroundingResult:
        """Run the pipeline and return the text together with its references."""
        grounding = self._ingestion.ingest(metadata)
        if grounding is None:
            return GroundingResult(text=text)

        try:
            return await self._run(text, grounding)
        except CitationEngineError as e:
            self._logger.error(
                "Grounding pipeline failed, returning text unchanged",
                error=e.message,
                error_type=type(e).__name__,
            )
            return GroundingResult(text=text)

    async def _run(self, text: str, grounding: GroundingInput) -> GroundingResult:
        selections = self._select(grounding)
        if not selections:
            self._logger.info("No support had an eligible chunk")
            return GroundingResult(text=text)

        numbers, titles = self._number_sources(selections)
        resolved = await self._resolve(list(numbers))

        references = [
            ResolvedReference(
                original_uri=uri,
                resolved_uri=resolved.get(uri) or uri,
                title=titles[uri] or self._settings.default_reference_title,
            )
            for uri in numbers
        ]

        edits = [
            Edit(
                start=s.support.span.start,
                end=s.support.span.end,
                replacement=format_inline_citation(
                    self._settings.annotation_style,
                    text[s.support.span.start:s.support.span.end],
                    numbers[s.chunk.uri],
                    resolved.get(s.chunk.uri) or s.chunk.uri,
                ),
            )
            for s in self._drop_overlapping(selections, len(text))
        ]

        annotated = self._annotator.annotate(text, edits)
        return GroundingResult(
            text=self._builder.append_to(annotated, references),
            references=references,
        )

    def _select(self, grounding: GroundingInput) -> list[_Selection]:
        """Pick one chunk per support, ordered by ascending span start."""
        selections: list[_Selection] = []
        for support in sorted(grounding.supports, key=lambda s: s.span.start):
            best = select_best_chunk(support, grounding.chunks)
            if best is None:
                self._logger.info(
                    "Skipping support without an eligible chunk",
                    start=support.span.start,
                    end=support.span.end,
                )
                continue
            selections.append(_Selection(support=support, chunk=grounding.chunks[best]))
        return selections

    @staticmethod
    def _number_sources(
        selections: list[_Selection],
    ) -> tuple[dict[str, int], dict[str, str | None]]:
        """Number distinct URIs by first appearance."""
        numbers: dict[str, int] = {}
        titles: dict[str, str | None] = {}
        for selection in selections:
            uri = selection.chunk.uri
            if uri not in numbers:
                numbers[uri] = len(numbers) + 1
                titles[uri] = selection.chunk.title
        return numbers, titles

    def _drop_overlapping(self, selections: list[_Selection], text_length: int) -> list[_Selection]:
        """Drop supports overlapping an earlier in-bounds span.

        Out-of-bounds spans are kept (the annotator skips them) but never
        claim text, so they cannot shadow a later valid support.
        """
        kept: list[_Selection] = []
        last_end = 0
        for selection in selections:
            span = selection.support.span
            if not 0 <= span.start < span.end <= text_length:
                kept.append(selection)
                continue
            if span.start < last_end:
                self._logger.warning(
                    "Dropping support overlapping an earlier span",
                    start=span.start,
                    end=span.end,
                    previous_end=last_end,
                )
                continue
            kept.append(selection)
            last_end = span.end
        return kept

    async def _resolve(self, urls: list[str]) -> dict[str, str]:
        if self._resolver is not None:
            return await self._resolver.resolve_all(urls)
        async with BatchResolver.from_settings(self._settings) as resolver:
            return await resolver.resolve_all(urls)


__all__ = [
    "GroundingProcessor",
    "GroundingResult",
]
