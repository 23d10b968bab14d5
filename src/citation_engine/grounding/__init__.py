"""Grounding ingestion, chunk selection and the annotation pipeline."""

from citation_engine.grounding.ingestion import GroundingIngestion, parse_metadata
from citation_engine.grounding.processor import GroundingProcessor, GroundingResult
from citation_engine.grounding.report import GroundingReport
from citation_engine.grounding.selection import select_best_chunk


__all__ = [
    "GroundingIngestion",
    "GroundingProcessor",
    "GroundingReport",
    "GroundingResult",
    "parse_metadata",
    "select_best_chunk",
]
