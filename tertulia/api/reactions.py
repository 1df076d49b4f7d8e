"""
Reaction endpoints.

PUT /api/reactions  toggles the caller's reaction on a post or comment.
GET /api/reactions  lists emoji counts and, for one emoji, who used it.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user
from tertulia.config import settings
from tertulia.database import get_db
from tertulia.models.comment import Comment
from tertulia.models.post import Post
from tertulia.models.user import User
from tertulia.schemas.reaction import ReactionList, ReactionToggle, ReactionToggleResponse
from tertulia.services import policy, reaction_service
from tertulia.services.presenters import present_comment, present_post, present_user, reaction_summary

router = APIRouter(prefix="/reactions", tags=["reactions"])


def _post_and_comment(subject: Post | Comment) -> tuple[Post, Comment | None]:
    if isinstance(subject, Comment):
        return subject.post, subject
    return subject, None


@router.put("", response_model=ReactionToggleResponse)
async def toggle_reaction(
    reaction_in: ReactionToggle,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReactionToggleResponse:
    """
    Create, replace or remove the caller's reaction.

    Same emoji as before removes it, a different one replaces it in place.
    Fails with 422 "Maximum reactions reached." when the subject already
    shows the maximum number of distinct emoji and this one is new.
    """
    subject = reaction_service.resolve_subject(db, reaction_in.subject_type, reaction_in.subject_id)
    post, comment = _post_and_comment(subject)
    policy.authorize(policy.can_react(db, current_user, post, comment), "You may not react to this.")

    result = reaction_service.toggle_reaction(db, current_user, subject, reaction_in.emoji)
    return ReactionToggleResponse(
        status=result.status,
        emoji=result.reaction.emoji if result.reaction else None,
        reactions=reaction_summary(db, subject, current_user),
    )


@router.get("", response_model=ReactionList)
async def list_reactions(
    subject_type: Literal["post", "comment"],
    subject_id: int,
    emoji: str | None = Query(default=None, max_length=settings.EMOJI_MAX_LENGTH),
    cursor: str | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReactionList:
    """
    Emoji counts for a subject plus one page of the users behind one emoji
    (the most used emoji unless ``emoji`` is given). Follow ``next_cursor``
    for further pages.
    """
    subject = reaction_service.resolve_subject(db, subject_type, subject_id)
    post, comment = _post_and_comment(subject)
    policy.authorize(policy.can_view(db, current_user, post))

    page = reaction_service.list_reactors(db, subject, emoji=(emoji or "").strip() or None, cursor=cursor)

    return ReactionList(
        reactions=reaction_summary(db, subject, current_user),
        users=[present_user(db, u, current_user) for u in page.users],
        selected_emoji=page.selected_emoji,
        next_cursor=page.next_cursor,
        post=present_post(db, post, current_user),
        comment=present_comment(db, comment, current_user) if comment else None,
    )
