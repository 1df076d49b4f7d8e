import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user, get_optional_user
from tertulia.api.posts import get_visible_post
from tertulia.core.errors import NotFoundError
from tertulia.core.events import COMMENT_DELETED
from tertulia.database import get_db
from tertulia.models.comment import Comment
from tertulia.models.user import User
from tertulia.schemas.entry import CommentCreate, CommentResponse, CommentUpdate, StatusResponse
from tertulia.services import policy
from tertulia.services.presenters import present_comment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def _get_visible_comment(comment_id: int, viewer: User, db: Session) -> Comment:
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if comment is None or not policy.can_view(db, viewer, comment.post):
        raise NotFoundError("Comment not found.")
    return comment


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: int,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> list[CommentResponse]:
    get_visible_post(post_id, viewer, db)
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.id)
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [present_comment(db, c, viewer) for c in comments]


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    post = get_visible_post(post_id, current_user, db)
    policy.authorize(policy.can_comment(db, current_user, post), "You may not comment on this post.")

    comment = Comment(post_id=post.id, user_id=current_user.id, content=comment_in.content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("User %s commented %s on post %s", current_user.id, comment.id, post.id)
    return present_comment(db, comment, current_user)


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CommentResponse:
    comment = _get_visible_comment(comment_id, current_user, db)
    policy.authorize(comment.user_id == current_user.id, "Not the comment author.")

    comment.content = comment_in.content
    db.commit()
    db.refresh(comment)
    return present_comment(db, comment, current_user)


@router.delete("/comments/{comment_id}", response_model=StatusResponse)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    comment = _get_visible_comment(comment_id, current_user, db)
    policy.authorize(policy.can_delete_entry(current_user, comment), "Not the comment author.")

    db.delete(comment)
    db.commit()
    logger.info("User %s deleted comment %s", current_user.id, comment_id)
    return StatusResponse(status=COMMENT_DELETED, id=comment_id)
