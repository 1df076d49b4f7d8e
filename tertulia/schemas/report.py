from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tertulia.schemas.entry import CommentResponse, PostResponse
from tertulia.schemas.user import UserResponse

ReportStatus = Literal["pending", "resolved", "dismissed"]


class ReportCreate(BaseModel):
    subject_type: Literal["post", "comment", "user"]
    subject_id: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason must not be blank")
        return v


class ReportUpdate(BaseModel):
    status: ReportStatus
    resolution_note: str | None = Field(None, max_length=1000)


class ReportResponse(BaseModel):
    id: int
    reporter_id: int
    subject_type: str
    subject_id: int
    reason: str
    status: str
    resolution_note: str | None = None
    resolved_by_id: int | None = None
    resolved_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ReportDetail(ReportResponse):
    """A report with the reporter and, unless deleted meanwhile, the reported object."""

    reporter: UserResponse
    post: PostResponse | None = None
    comment: CommentResponse | None = None
    user: UserResponse | None = None


class ReportList(BaseModel):
    reports: list[ReportResponse]
    next_cursor: str | None = None
