"""Grounding and citation API routes.

Service Endpoints:
- POST /v1/grounding/annotate - Annotate text with citations and references
- POST /v1/grounding/score - Grounding quality summary
- POST /v1/citations/report - Append a reference list for accumulated citations
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from citation_engine.citations.manager import CitationManager
from citation_engine.core.logging import get_logger
from citation_engine.grounding.processor import GroundingProcessor
from citation_engine.grounding.report import GroundingReport
from citation_engine.resolution.batch import BatchResolver
from citation_engine.schemas.citations import Citation, ResolvedReference


logger = get_logger(__name__)


# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/v1",
    tags=["Grounding"],
)


def get_batch_resolver(request: Request) -> BatchResolver:
    """Return the application's shared batch resolver."""
    return request.app.state.batch_resolver


# =============================================================================
# Request/Response Models
# =============================================================================

class AnnotateRequest(BaseModel):
    """Request model for annotation and scoring.

    Attributes:
        text: Generated text
        metadata: Grounding payload (camelCase or snake_case keys)
    """

    text: str = Field(..., description="Generated text")
    metadata: dict[str, Any] | None = Field(
        default=None,
        description="Grounding metadata with chunks and supports",
    )


class AnnotateResponse(BaseModel):
    """Response model for annotation."""

    text: str = Field(..., description="Annotated text with references")
    references: list[ResolvedReference] = Field(
        default_factory=list,
        description="References in display order",
    )


class ScoreResponse(BaseModel):
    """Response model for grounding score."""

    score: float = Field(..., description="Mean confidence across supports")
    has_grounding: bool = Field(..., description="Whether score reaches the threshold")
    urls: list[str] = Field(default_factory=list, description="Chunk URIs")


class ReportRequest(BaseModel):
    """Request model for citation report assembly."""

    text: str = Field(..., description="Report text, possibly with [n] markers")
    citations: list[Citation] = Field(
        default_factory=list,
        description="Citations accumulated across rounds",
    )


class ReportResponse(BaseModel):
    """Response model for citation report assembly."""

    text: str = Field(..., description="Report with reference list appended")


# =============================================================================
# API Endpoints
# =============================================================================

@router.post(
    "/grounding/annotate",
    response_model=AnnotateResponse,
    summary="Annotate text with citations",
)
async def annotate(
    body: AnnotateRequest,
    resolver: BatchResolver = Depends(get_batch_resolver),
) -> AnnotateResponse:
    """Run the grounding pipeline over the request text."""
    result = await GroundingProcessor(resolver=resolver).run(body.text, body.metadata)
    logger.info("Annotated text", references=len(result.references))
    return AnnotateResponse(text=result.text, references=result.references)


@router.post(
    "/grounding/score",
    response_model=ScoreResponse,
    summary="Score grounding quality",
)
async def score(body: AnnotateRequest) -> ScoreResponse:
    """Summarize how well the text is grounded."""
    report = GroundingReport(body.text, body.metadata or {})
    return ScoreResponse(
        score=report.grounding_score(),
        has_grounding=report.has_grounding(),
        urls=report.grounding_urls(),
    )


@router.post(
    "/citations/report",
    response_model=ReportResponse,
    summary="Assemble a citation report",
)
async def citation_report(
    body: ReportRequest,
    resolver: BatchResolver = Depends(get_batch_resolver),
) -> ReportResponse:
    """Deduplicate citations and append the resolved reference list."""
    manager = CitationManager().add_all(body.citations)
    text = await manager.assemble_report(body.text, resolver=resolver)
    return ReportResponse(text=text)


__all__ = [
    "AnnotateRequest",
    "AnnotateResponse",
    "ReportRequest",
    "ReportResponse",
    "ScoreResponse",
    "get_batch_resolver",
    "router",
]
