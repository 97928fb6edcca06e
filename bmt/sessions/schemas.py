"""Schemas for pumping sessions."""

from pydantic import BaseModel, Field


class SessionCreate(BaseModel):
    """Schema for logging a new session."""

    amount: float = Field(..., gt=0, description="Volume in fluid ounces")
    notes: str | None = Field(None, max_length=500)


class SessionResponse(BaseModel):
    """Schema for a stored session."""

    id: str
    timestamp: str
    amount_oz: float
    notes: str | None = None
    use_by_fridge: str
    use_by_frozen: str

    model_config = {"from_attributes": True}


class SessionListResponse(BaseModel):
    """Sessions, newest first, with the total volume logged."""

    sessions: list[SessionResponse]
    total: float


class SessionUpdate(BaseModel):
    """Schema for editing a session; omitted fields are left unchanged."""

    amount_oz: float | None = Field(None, gt=0, description="Volume in fluid ounces")
    notes: str | None = Field(None, max_length=500)
