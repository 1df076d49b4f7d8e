"""
Resource transformation: ORM rows -> response schemas, as seen by a viewer.

What a response contains depends on who asks (email, block flags, whether
the viewer reacted), so every presenter takes the viewing user, None for
anonymous requests.
"""

from sqlalchemy.orm import Session

from tertulia.config import settings
from tertulia.models.comment import Comment
from tertulia.models.follow import Follow
from tertulia.models.post import Post
from tertulia.models.user import User
from tertulia.models.user_block import UserBlock
from tertulia.schemas.entry import CommentResponse, PostResponse, ReactionCount
from tertulia.schemas.user import UserResponse
from tertulia.services import reaction_service


def present_user(db: Session, user: User, viewer: User | None, with_counts: bool = False) -> UserResponse:
    is_self = viewer is not None and viewer.id == user.id
    can_view_sensitive = is_self or (viewer is not None and viewer.is_moderator)
    # Admins only see other people's addresses on debug deployments
    can_view_email = is_self or (viewer is not None and viewer.is_admin and settings.DEBUG)

    response = UserResponse(
        id=user.id,
        username=user.username,
        avatar_url=user.avatar_url,
        email=user.email if can_view_email else "",
        role=user.role,
        permissions=sorted(user.capability_names),
        is_active=user.is_active,
        created_at=user.created_at,
        updated_at=user.updated_at if can_view_sensitive else None,
    )

    if viewer is not None and not is_self:
        response.is_followed = Follow.exists(db, viewer.id, user.id)
        response.is_blocked = UserBlock.has_blocked(db, viewer.id, user.id)
        response.blocked_me = UserBlock.has_blocked(db, user.id, viewer.id)
    elif is_self:
        response.is_followed = False
        response.is_blocked = False
        response.blocked_me = False

    if with_counts:
        response.follows_count = db.query(Follow).filter(Follow.follower_id == user.id).count()
        response.followers_count = db.query(Follow).filter(Follow.followed_id == user.id).count()

    return response


def reaction_summary(db: Session, subject: Post | Comment, viewer: User | None) -> list[ReactionCount]:
    mine = reaction_service.user_emoji(db, subject, viewer)
    return [
        ReactionCount(emoji=emoji, count=count, reacted_by_user=emoji == mine)
        for emoji, count in reaction_service.aggregate_reactions(db, subject)
    ]


def present_post(db: Session, post: Post, viewer: User | None) -> PostResponse:
    return PostResponse(
        id=post.id,
        user_id=post.user_id,
        user=present_user(db, post.user, viewer),
        visibility=post.visibility,
        is_closed=post.is_closed,
        content=post.content,
        comments_count=db.query(Comment).filter(Comment.post_id == post.id).count(),
        reactions=reaction_summary(db, post, viewer),
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def present_comment(db: Session, comment: Comment, viewer: User | None) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        user=present_user(db, comment.user, viewer),
        content=comment.content,
        reactions=reaction_summary(db, comment, viewer),
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )
