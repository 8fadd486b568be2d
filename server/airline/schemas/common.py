"""Common Pydantic schemas."""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="JSON path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    code: Optional[str] = Field(None, description="Application-specific error code")
    retryable: Optional[bool] = Field(None, description="Whether the operation can be retried")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class Page(BaseModel, Generic[T]):
    """One page of an in-memory listing."""

    items: List[T] = Field(default_factory=list, description="Items on this page")
    page: int = Field(..., ge=1, description="1-based page number")
    page_size: int = Field(..., ge=1, description="Maximum items per page")
    total: int = Field(..., ge=0, description="Items across all pages")
    total_pages: int = Field(..., ge=0, description="Number of pages")


PROBLEM_RESPONSES = {
    400: {"model": Problem, "description": "Invalid request"},
    401: {"model": Problem, "description": "Missing or invalid credentials"},
    403: {"model": Problem, "description": "Role not allowed"},
    404: {"model": Problem, "description": "Resource not found"},
    503: {"model": Problem, "description": "Store unavailable"},
}
