"""
Emergency contact schemas.
"""

from typing import Optional

from pydantic import Field

from backend.app.schemas.common import CamelModel, UtcDatetime


class EmergencyContactCreate(CamelModel):
    """Body of POST /api/emergency-contacts. Both fields required and non-empty."""
    name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., min_length=1, max_length=32)


class EmergencyContactUpdate(CamelModel):
    """Partial update: only the supplied fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, min_length=1, max_length=32)


class EmergencyContactResponse(CamelModel):
    id: str
    user_id: int
    name: str
    phone_number: str
    created_at: UtcDatetime
