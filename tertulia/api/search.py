"""
Search endpoint.

GET /api/search?type=post&q=...&limit=20

Posts are matched on content and restricted to what the requesting user may
see; users are matched on username among active accounts.
"""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user
from tertulia.config import settings
from tertulia.database import get_db
from tertulia.models.post import Post
from tertulia.models.user import User
from tertulia.schemas.site import SearchResults
from tertulia.services import policy
from tertulia.services.presenters import present_post, present_user

router = APIRouter(prefix="/search", tags=["search"])

_MAX_LIMIT = 100


@router.get("", response_model=SearchResults)
async def search(
    q: str = Query(..., min_length=1, description="Search query"),
    search_type: Literal["post", "user"] = Query("post", alias="type"),
    limit: int | None = Query(None, ge=1, le=_MAX_LIMIT),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SearchResults:
    term = q.strip()
    if not term:
        raise HTTPException(status_code=422, detail="q must not be blank")
    limit = limit or settings.SEARCH_LIMIT
    pattern = f"%{term}%"

    if search_type == "user":
        users = (
            db.query(User)
            .filter(User.is_active.is_(True), User.username.ilike(pattern))
            .order_by(User.username)
            .limit(limit)
            .all()
        )
        return SearchResults(type="user", query=term, users=[present_user(db, u, current_user) for u in users])

    posts = (
        db.query(Post)
        .filter(Post.content.ilike(pattern), policy.visible_posts_clause(current_user))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )
    return SearchResults(type="post", query=term, posts=[present_post(db, p, current_user) for p in posts])
