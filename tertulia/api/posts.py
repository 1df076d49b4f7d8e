import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user, get_optional_user
from tertulia.config import settings
from tertulia.core.capabilities import Capability
from tertulia.core.errors import NotFoundError
from tertulia.core.events import POST_DELETED
from tertulia.database import get_db
from tertulia.models.follow import Follow
from tertulia.models.post import VISIBILITY_PRIVATE, Post
from tertulia.models.user import User
from tertulia.schemas.entry import PostCreate, PostList, PostResponse, PostUpdate, StatusResponse
from tertulia.services import policy
from tertulia.services.pagination import paginate_desc
from tertulia.services.presenters import present_post

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def get_visible_post(post_id: int, viewer: User | None, db: Session) -> Post:
    """
    Fetch a post the viewer may see. Posts hidden from the viewer answer 404
    like missing ones so their existence does not leak.
    """
    post = db.query(Post).filter(Post.id == post_id).first()
    if post is None or not policy.can_view(db, viewer, post):
        raise NotFoundError("Post not found.")
    return post


@router.get("", response_model=PostList)
async def home_feed(
    cursor: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PostList:
    """The viewer's own posts plus non-private posts of followed users, newest first."""
    followed = select(Follow.followed_id).where(Follow.follower_id == current_user.id)
    query = db.query(Post).filter(
        or_(
            Post.user_id == current_user.id,
            and_(Post.user_id.in_(followed), Post.visibility != VISIBILITY_PRIVATE),
        )
    )
    posts, next_cursor = paginate_desc(query, Post, cursor, settings.FEED_PAGE_SIZE)
    return PostList(
        posts=[present_post(db, p, current_user) for p in posts],
        next_cursor=next_cursor,
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_in: PostCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    policy.authorize(policy.has_capability(current_user, Capability.POST), "You may not publish posts.")

    post = Post(
        user_id=current_user.id,
        content=post_in.content,
        visibility=post_in.visibility,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("User %s published post %s", current_user.id, post.id)
    return present_post(db, post, current_user)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    post = get_visible_post(post_id, viewer, db)
    return present_post(db, post, viewer)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    post_in: PostUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PostResponse:
    post = get_visible_post(post_id, current_user, db)
    policy.authorize(post.user_id == current_user.id, "Not the post author.")

    for field, value in post_in.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)
    db.commit()
    db.refresh(post)
    return present_post(db, post, current_user)


@router.delete("/{post_id}", response_model=StatusResponse)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Delete a post with its comments and every reaction on either."""
    post = get_visible_post(post_id, current_user, db)
    policy.authorize(policy.can_delete_entry(current_user, post), "Not the post author.")

    db.delete(post)
    db.commit()
    logger.info("User %s deleted post %s", current_user.id, post_id)
    return StatusResponse(status=POST_DELETED, id=post_id)
