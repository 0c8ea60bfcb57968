"""
Mushroom Hunter Backend — Shared Pydantic Schemas
===================================================

What:  Response models shared by every resource: the error envelope, the
       pagination block and the health check.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """
    What:  Page metadata attached to every paginated list response.
    How:   Offset-based. The web client renders numbered pages in the
           species explorer and "load more" on the findings list, both of
           which only need these six numbers.

    Invariants:
        total_pages = ceil(total / limit)
        has_next    = page < total_pages
        has_prev    = page > 1
    """
    total: int = Field(description="Total number of items matching the filters")
    page: int = Field(description="Current page (1-based)")
    limit: int = Field(description="Items per page")
    total_pages: int = Field(description="Number of pages")
    has_next: bool = Field(description="Whether a following page exists")
    has_prev: bool = Field(description="Whether a previous page exists")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Access denied",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
