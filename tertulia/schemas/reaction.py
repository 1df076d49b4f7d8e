from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tertulia.config import settings
from tertulia.schemas.entry import CommentResponse, PostResponse, ReactionCount
from tertulia.schemas.user import UserResponse


class ReactionToggle(BaseModel):
    subject_type: Literal["post", "comment"]
    subject_id: int = Field(..., gt=0)
    emoji: str = Field(..., min_length=1, max_length=settings.EMOJI_MAX_LENGTH)

    @field_validator("emoji")
    @classmethod
    def emoji_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Emoji must not be blank")
        return v


class ReactionToggleResponse(BaseModel):
    status: str
    # The caller's emoji on the subject after the toggle, None once removed
    emoji: str | None = None
    reactions: list[ReactionCount] = []


class ReactionList(BaseModel):
    reactions: list[ReactionCount]
    users: list[UserResponse]
    selected_emoji: str | None = None
    next_cursor: str | None = None
    post: PostResponse
    comment: CommentResponse | None = None
