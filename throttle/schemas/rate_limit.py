"""Pydantic schemas for rate limit responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PingResponse(BaseModel):
    """Body returned by the rate-limited ping endpoint."""

    success: bool = Field(True, description="Always true for admitted requests.")
    message: str = Field("pong", description="Fixed reply text.")


class RateLimitErrorResponse(BaseModel):
    """Body of a 429 Too Many Requests response."""

    success: bool = Field(False, description="Always false for rejected requests.")
    message: str = Field(
        ...,
        description="Human-readable hint, e.g. 'Too many requests. Please try again in 60 seconds.'",
    )


class RateLimitStatusResponse(BaseModel):
    """Current window usage for the calling client."""

    client_hash: str = Field(
        ..., description="Short SHA-256 digest of the client identifier (the address itself is never echoed)."
    )
    limit: int = Field(..., ge=1, description="Maximum requests per window.")
    used: int = Field(..., ge=0, description="Requests counted in the current window.")
    remaining: int = Field(..., ge=0, description="Requests left before throttling.")
    reset_at: int | None = Field(
        None,
        description="UNIX epoch seconds when the current window ends; null when no window is open.",
    )
    window_ms: int = Field(..., ge=1, description="Window size in milliseconds.")
