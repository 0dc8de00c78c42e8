"""
NoteHub Backend: Pydantic Request/Response Schemas
===================================================

What:  Pydantic models defining the HTTP contract.
How:   FastAPI validates request bodies against these models and serializes
       responses through them. Schemas stay separate from the SQLAlchemy
       model so the API contract and table layout can change independently.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


# Range of the numbers accepted by the registry
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /api/notes. Blank values are rejected by the note store."""
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")


class NotePatch(BaseModel):
    """
    Body of PATCH /api/notes/{id}.

    Every field is optional. Only the keys the client actually sent are
    applied (`model_dump(exclude_unset=True)`), so an absent field keeps its
    stored value while a field sent as "" or null is rejected by the store
    instead of silently clearing the note.
    """
    title: Optional[str] = Field(default=None, description="Replacement title")
    content: Optional[str] = Field(default=None, description="Replacement body")

    def supplied_fields(self) -> dict:
        return self.model_dump(exclude_unset=True)


class GreetingParams(BaseModel):
    """Query string or JSON body for /greet."""
    salutation: Optional[str] = None
    name: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full representation of a note, returned by every note endpoint."""
    id: int = Field(description="Store-assigned note identifier")
    title: str
    content: str
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last modification time (UTC ISO 8601)")

    model_config = {"from_attributes": True}

    @field_serializer("created_at", "updated_at")
    def serialize_utc(self, value: datetime) -> str:
        # SQLite hands timestamps back naive; they are stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


class PoemResponse(BaseModel):
    """A poem document loaded from YAML."""
    title: str
    text: str


class HealthResponse(BaseModel):
    status: str = Field(description="ok or unavailable")
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "status": 404,
            "error": "not_found",
            "message": "note with ID '7' was not found",
            "details": {"resource": "note", "resource_id": "7"},
            "request_id": "a1b2c3d4"
        }
    """
    status: int = Field(description="HTTP status code")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
