from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from tertulia.schemas.entry import PostResponse
from tertulia.schemas.user import UserResponse


class SiteSettingsResponse(BaseModel):
    registration_open: bool
    # None while the environment defaults are in effect
    updated_at: datetime | None = None


class SiteSettingsUpdate(BaseModel):
    registration_open: bool


class SearchResults(BaseModel):
    type: Literal["post", "user"]
    query: str
    posts: list[PostResponse] = []
    users: list[UserResponse] = []
