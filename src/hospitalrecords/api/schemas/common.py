"""
Common response schemas.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ErrorResponse(BaseModel):
    """Standardized error response schema."""

    success: bool = Field(False, description="Operation success status")
    error: str = Field(..., description="Error type/code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: str = Field(default_factory=_utcnow_iso, description="Error timestamp")
    request_id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Request ID for tracking")


class MessageResponse(BaseModel):
    """Confirmation of an update or delete."""

    message: str = Field(..., description="Confirmation message")


class CreatedResponse(BaseModel):
    """Confirmation of a create, with the new identifier."""

    message: str = Field(..., description="Confirmation message")
    id: str = Field(..., description="Identifier assigned by the store")


class LoginRequest(BaseModel):
    apiKey: str = Field(..., min_length=1, description="API key issued to the user")


class SessionResponse(BaseModel):
    message: str = Field("", description="Response message")
    user: Optional[str] = Field(None, description="Logged-in user id")
