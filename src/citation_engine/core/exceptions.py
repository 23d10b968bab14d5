"""Exception hierarchy for the citation engine.

Citation enrichment fails open: these exceptions are raised inside a
component and caught at its boundary, where it degrades to a safe default
(original URL, fallback value, unchanged text). Only the HTTP layer turns
them into error responses.
"""

from typing import Any


class CitationEngineError(Exception):
    """Base class for citation engine errors.

    Attributes:
        message: What went wrong
        cause: Underlying exception, also chained as ``__cause__``
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class RedirectResolutionError(CitationEngineError):
    """A HEAD request in a redirect chain failed.

    Attributes:
        url: URL whose resolution was requested (not the failing hop)
        hops: Redirects already followed when the failure happened
    """

    def __init__(
        self,
        message: str,
        url: str,
        hops: int = 0,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.url = url
        self.hops = hops


class GroundingValidationError(CitationEngineError):
    """A grounding payload does not match the expected wire schema.

    Attributes:
        field: Top-level payload field being validated
        value: The rejected payload
    """

    def __init__(
        self,
        message: str,
        field: str,
        value: Any = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.field = field
        self.value = value


class ThrottleError(CitationEngineError):
    """A throttled batch failed as a whole.

    Individual task failures never raise this; they get the batch fallback.
    """
