"""Schemas for entries: the posts and comments users publish and react to."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from tertulia.schemas.user import UserResponse

Visibility = Literal["public", "following", "private"]


class ReactionCount(BaseModel):
    emoji: str
    count: int
    reacted_by_user: bool = False


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    visibility: Visibility = "public"


class PostUpdate(BaseModel):
    content: str | None = Field(None, min_length=1, max_length=5000)
    visibility: Visibility | None = None
    is_closed: bool | None = None


class PostResponse(BaseModel):
    type: Literal["post"] = "post"
    id: int
    user_id: int
    user: UserResponse
    visibility: str
    is_closed: bool
    content: str
    comments_count: int = 0
    reactions: list[ReactionCount] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PostList(BaseModel):
    posts: list[PostResponse]
    next_cursor: str | None = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    type: Literal["comment"] = "comment"
    id: int
    post_id: int
    user_id: int
    user: UserResponse
    content: str
    reactions: list[ReactionCount] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StatusResponse(BaseModel):
    """Outcome of a mutation, see core.events for the status values."""

    status: str
    id: int | None = None
