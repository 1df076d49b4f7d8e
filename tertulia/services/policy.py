"""
Authorization rules.

Every "may this user do X" question is answered here so routes and services
share one definition. Predicates return bools; ``authorize``
raises ForbiddenError.
"""

from sqlalchemy import and_, exists, or_, true
from sqlalchemy.orm import Session

from tertulia.core.capabilities import Capability
from tertulia.core.errors import ForbiddenError
from tertulia.models.comment import Comment
from tertulia.models.follow import Follow
from tertulia.models.post import VISIBILITY_FOLLOWING, VISIBILITY_PUBLIC, Post
from tertulia.models.user import User
from tertulia.models.user_block import UserBlock


def has_capability(user: User | None, capability: Capability) -> bool:
    return user is not None and user.has_capability(capability)


def is_moderator(user: User | None) -> bool:
    return user is not None and user.is_moderator


def is_blocked_either_way(db: Session, a: User, b: User) -> bool:
    if a.id == b.id:
        return False
    return UserBlock.exists_between(db, a.id, b.id)


def can_view(db: Session, user: User | None, post: Post) -> bool:
    """
    Whether ``user`` (None for anonymous visitors) may see ``post``.

    Moderators and the author always can. A block in either direction with
    the author hides the post. Otherwise visibility decides: public for
    everyone, following for the author's followers, private for nobody else.
    """
    if user is not None:
        if user.is_moderator or user.id == post.user_id:
            return True
        if UserBlock.exists_between(db, user.id, post.user_id):
            return False

    if post.visibility == VISIBILITY_PUBLIC:
        return True
    if post.visibility == VISIBILITY_FOLLOWING:
        return user is not None and Follow.exists(db, user.id, post.user_id)
    return False


def visible_posts_clause(user: User | None):
    """SQL filter on Post with the same outcome as can_view, for list queries."""
    if user is None:
        return Post.visibility == VISIBILITY_PUBLIC
    if user.is_moderator:
        return true()

    blocked = exists().where(
        or_(
            and_(UserBlock.blocker_id == user.id, UserBlock.blocked_id == Post.user_id),
            and_(UserBlock.blocker_id == Post.user_id, UserBlock.blocked_id == user.id),
        )
    )
    following = exists().where(Follow.follower_id == user.id, Follow.followed_id == Post.user_id)
    return or_(
        Post.user_id == user.id,
        and_(
            ~blocked,
            or_(
                Post.visibility == VISIBILITY_PUBLIC,
                and_(Post.visibility == VISIBILITY_FOLLOWING, following),
            ),
        ),
    )


def can_react(db: Session, user: User, post: Post, comment: Comment | None = None) -> bool:
    if not has_capability(user, Capability.REACT):
        return False
    if not can_view(db, user, post):
        return False
    # Reacting to a comment is off when either side blocked the other
    if comment is not None and is_blocked_either_way(db, user, comment.user):
        return False
    return True


def can_comment(db: Session, user: User, post: Post) -> bool:
    if not has_capability(user, Capability.COMMENT):
        return False
    if not can_view(db, user, post):
        return False
    return not post.is_closed or post.user_id == user.id


def can_delete_entry(user: User, entry: Post | Comment) -> bool:
    return entry.user_id == user.id or user.is_moderator


def authorize(allowed: bool, message: str | None = None) -> None:
    if not allowed:
        raise ForbiddenError(message)
