from datetime import datetime

from pydantic import BaseModel, Field


class InvitationCreate(BaseModel):
    # Falls back to settings.INVITATION_EXPIRE_HOURS; 0 means never expires
    expires_in_hours: int | None = Field(None, ge=0, le=24 * 365)


class InvitationResponse(BaseModel):
    id: int
    token: str
    created_by_id: int | None = None
    used_by_id: int | None = None
    used_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
