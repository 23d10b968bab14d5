"""Application configuration using Pydantic Settings.

Environment variables are loaded with the CITATION_ENGINE_ prefix, e.g.
CITATION_ENGINE_REDIRECT_MAX_HOPS=10.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from citation_engine.core.constants import (
    DEFAULT_GROUNDING_THRESHOLD,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_MAX_HOPS,
    DEFAULT_MIN_SPACING_MS,
    DEFAULT_REDIRECT_TIMEOUT,
    DEFAULT_REFERENCE_TITLE,
    DEFAULT_REFERENCES_HEADING,
    DEFAULT_USER_AGENT,
    AnnotationStyle,
    ReferenceStyle,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Pattern: Pydantic Settings with Environment Variables
    """

    # Service configuration
    service_name: str = "citation-engine"
    port: int = 8090
    environment: str = Field(default="development", description="Runtime environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Redirect resolution
    redirect_max_hops: int = Field(
        default=DEFAULT_MAX_HOPS,
        ge=1,
        description="Maximum redirects followed for a single URL",
    )
    redirect_timeout_seconds: float = Field(
        default=DEFAULT_REDIRECT_TIMEOUT,
        gt=0,
        description="Timeout for each HEAD request",
    )
    redirect_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with HEAD requests",
    )

    # Throttling
    throttle_max_concurrent: int = Field(
        default=DEFAULT_MAX_CONCURRENT,
        ge=1,
        description="Maximum resolutions in flight at once",
    )
    throttle_min_spacing_ms: int = Field(
        default=DEFAULT_MIN_SPACING_MS,
        ge=0,
        description="Pause before a freed slot dispatches its next task",
    )
    resolution_deadline_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Overall deadline for one resolution batch (None = no deadline)",
    )

    # Output formatting
    reference_style: ReferenceStyle = Field(
        default=ReferenceStyle.NUMBERED,
        description="Reference line format",
    )
    annotation_style: AnnotationStyle = Field(
        default=AnnotationStyle.MARKER,
        description="Inline citation format",
    )
    references_heading: str = Field(
        default=DEFAULT_REFERENCES_HEADING,
        description="Heading emitted above the reference list",
    )
    default_reference_title: str = Field(
        default=DEFAULT_REFERENCE_TITLE,
        description="Title used when a source has none",
    )
    grounding_threshold: float = Field(
        default=DEFAULT_GROUNDING_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum mean confidence for text to count as grounded",
    )

    model_config = SettingsConfigDict(
        env_prefix="CITATION_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton
    """
    return Settings()
