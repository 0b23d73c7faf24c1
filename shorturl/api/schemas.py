"""
API Response Schemas

Pydantic models for API responses, kept apart from the endpoints so tests
and other modules can reuse them.
"""

from pydantic import BaseModel, Field


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    original_url: str = Field(..., description="The original long URL, exactly as submitted")
    short_url: str = Field(..., description="Host and short code, e.g. 'sho.rt/x2'")
