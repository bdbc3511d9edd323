"""
Employee Dashboard Backend — Pydantic Request/Response Schemas
===============================================================

What:  Pydantic models defining the API contract between the UI and backend.
Why:   Input coercion, response serialization and OpenAPI doc generation.
How:   FastAPI validates request bodies against the *Create/*Update models and
       serializes return values through the response models (by alias, so the
       pagination block comes out camelCase).

Required-field checks for name/email are NOT expressed here: a missing or
blank name must produce the service's 400 "Name and email are required",
not a schema error. The schema only types the fields and rejects values that
can never be valid (negative salary, over-long strings).
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends
# ══════════════════════════════════════════════════════════════════════════


class EmployeeCreate(BaseModel):
    """Body of POST /employees. Unknown keys are ignored."""

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    position: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    salary: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class EmployeeUpdate(BaseModel):
    """
    Body of PUT /employees/{id}.

    Presence matters: `model_fields_set` tells "position omitted" apart from
    "position: null". EmployeeService reads it to decide which columns to touch.
    """

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    position: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    salary: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class EmployeeResponse(BaseModel):
    """Full representation of an employee row."""

    id: int
    name: str
    email: str
    position: Optional[str] = None
    department: Optional[str] = None
    salary: Optional[Decimal] = Field(
        default=None,
        description="Exact decimal, serialized as a string (e.g. \"55000.00\")",
    )
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(BaseModel):
    """Pagination metadata returned alongside a list page."""

    current_page: int = Field(alias="currentPage")
    total_pages: int = Field(alias="totalPages")
    total_records: int = Field(alias="totalRecords")
    limit: int

    model_config = ConfigDict(populate_by_name=True)


class EmployeeListResponse(BaseModel):
    """GET /employees envelope."""

    success: bool = True
    data: List[EmployeeResponse]
    pagination: PaginationMeta


class EmployeeEnvelope(BaseModel):
    """Single-employee envelope for get, create and update."""

    success: bool = True
    message: Optional[str] = None
    data: EmployeeResponse


class MessageResponse(BaseModel):
    """Confirmation without payload (soft delete)."""

    success: bool = True
    message: str


class ServiceInfoResponse(BaseModel):
    """GET /: service identity."""

    success: bool = True
    message: str
    version: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "error": true,
            "message": "Email already exists",
            "request_id": "1a2b3c4d"
        }

    `stack` is only present when the server runs with ENVIRONMENT=development.
    """

    error: bool = True
    message: str
    request_id: Optional[str] = None
    stack: Optional[str] = None


class HealthResponse(BaseModel):
    """GET /health: service and database status."""

    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
