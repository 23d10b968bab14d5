"""Error handlers for API routes.

Every error leaves the service as an ErrorResponse body. Citation enrichment
itself fails open, so the only errors that reach a client are malformed
requests, grounding payloads that cannot be parsed (on endpoints that
report on them rather than annotate) and genuine bugs.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from citation_engine.core.exceptions import CitationEngineError, GroundingValidationError
from citation_engine.core.logging import get_logger


logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    """Standard error body.

    Attributes:
        error: Error category
        detail: Human-readable description
        code: Machine-readable error code
        path: Request path that failed
    """

    error: str
    detail: str
    code: str | None = Field(default=None, description="Machine-readable error code")
    path: str | None = None


def _error(request: Request, status_code: int, error: str, detail: str, code: str) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, code=code, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """422 for request bodies that fail schema validation, one entry per field."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', []))}: {err.get('msg', 'Invalid value')}"
        for err in exc.errors()
    )
    return _error(request, 422, "ValidationError", detail or "Validation error", "VALIDATION_ERROR")


async def grounding_validation_handler(
    request: Request,
    exc: GroundingValidationError,
) -> JSONResponse:
    """422 for grounding payloads that do not match the wire schema."""
    logger.info("Rejected grounding payload", path=request.url.path, field=exc.field)
    return _error(
        request,
        422,
        "ValidationError",
        f"Invalid {exc.field}: {exc.message}",
        "GROUNDING_VALIDATION_ERROR",
    )


async def citation_engine_error_handler(
    request: Request,
    exc: CitationEngineError,
) -> JSONResponse:
    logger.error(
        "Citation engine error",
        path=request.url.path,
        error=exc.message,
        error_type=type(exc).__name__,
    )
    return _error(request, 500, type(exc).__name__, exc.message, "CITATION_ENGINE_ERROR")


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return _error(request, 500, "InternalServerError", "An unexpected error occurred", "INTERNAL_ERROR")


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GroundingValidationError, grounding_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CitationEngineError, citation_engine_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)


__all__ = [
    "ErrorResponse",
    "register_error_handlers",
]
