from pydantic import BaseModel

from tertulia.schemas.user import UserResponse


class AuthContext(BaseModel):
    user: UserResponse | None = None


class PageContext(BaseModel):
    """Everything every page needs, built once per request by build_page_context."""

    name: str
    auth: AuthContext
    capabilities: list[str] = []
    is_moderator: bool = False
    registration_open: bool
    max_distinct_reactions: int
