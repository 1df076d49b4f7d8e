"""
Emoji reactions on posts and comments.

A user holds at most one reaction per subject. Toggling either creates it,
swaps its emoji in place, or removes it when the same emoji is sent again.
A subject may show at most ``MAX_DISTINCT_REACTIONS`` different emoji.

Authorization is the caller's job (see services.policy.can_react); this
module only enforces the data rules.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import distinct, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload

from tertulia.config import settings
from tertulia.core.errors import CapacityExceededError, ConflictError, NotFoundError, ValidationError
from tertulia.core.events import REACTION_CREATED, REACTION_DELETED, REACTION_REPLACED
from tertulia.models.comment import Comment
from tertulia.models.post import Post
from tertulia.models.reaction import SUBJECT_COMMENT, SUBJECT_POST, SUBJECT_TYPES, Reaction
from tertulia.models.user import User
from tertulia.services.pagination import paginate_desc

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    status: str
    reaction: Reaction | None


@dataclass
class ReactorPage:
    selected_emoji: str | None
    users: list[User]
    next_cursor: str | None


def resolve_subject(db: Session, subject_type: str, subject_id: int) -> Post | Comment:
    """Load the post or comment a reaction targets. Raises NotFoundError."""
    if subject_type not in SUBJECT_TYPES:
        raise ValidationError("Subject type must be 'post' or 'comment'.")

    model = Post if subject_type == SUBJECT_POST else Comment
    subject = db.query(model).filter(model.id == subject_id).first()
    if subject is None:
        raise NotFoundError(f"{subject_type.capitalize()} not found.")
    return subject


def subject_type_of(subject: Post | Comment) -> str:
    return SUBJECT_COMMENT if isinstance(subject, Comment) else SUBJECT_POST


def _subject_reactions(db: Session, subject: Post | Comment) -> Query:
    return db.query(Reaction).filter(
        Reaction.subject_type == subject_type_of(subject),
        Reaction.subject_id == subject.id,
    )


def _validate_emoji(emoji: str) -> str:
    emoji = (emoji or "").strip()
    if not emoji:
        raise ValidationError("Emoji must not be blank.")
    if len(emoji) > settings.EMOJI_MAX_LENGTH:
        raise ValidationError(f"Emoji may not be longer than {settings.EMOJI_MAX_LENGTH} characters.")
    return emoji


def toggle_reaction(db: Session, user: User, subject: Post | Comment, emoji: str) -> ToggleResult:
    """
    Create, replace or delete ``user``'s reaction on ``subject``.

    The existing row is read FOR UPDATE so concurrent toggles by the same user
    serialize on databases that support row locks. Where two first reactions
    still race, the unique constraint rejects the loser and ConflictError
    tells the client to resubmit.
    """
    emoji = _validate_emoji(emoji)
    subject_type = subject_type_of(subject)

    existing = _subject_reactions(db, subject).filter(Reaction.user_id == user.id).with_for_update().first()

    if existing is not None:
        if existing.emoji == emoji:
            db.delete(existing)
            db.commit()
            logger.info("User %s removed %s from %s %s", user.id, emoji, subject_type, subject.id)
            return ToggleResult(status=REACTION_DELETED, reaction=None)

        # Swapping to an emoji the subject does not carry yet adds a distinct value
        _check_capacity(db, subject, emoji, freed=existing.emoji)
        existing.emoji = emoji
        db.commit()
        db.refresh(existing)
        logger.info("User %s switched to %s on %s %s", user.id, emoji, subject_type, subject.id)
        return ToggleResult(status=REACTION_REPLACED, reaction=existing)

    _check_capacity(db, subject, emoji)

    reaction = Reaction(
        subject_type=subject_type,
        subject_id=subject.id,
        user_id=user.id,
        emoji=emoji,
    )
    db.add(reaction)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Concurrent reaction by user %s on %s %s", user.id, subject_type, subject.id)
        raise ConflictError() from exc
    db.refresh(reaction)
    logger.info("User %s reacted %s on %s %s", user.id, emoji, subject_type, subject.id)
    return ToggleResult(status=REACTION_CREATED, reaction=reaction)


def _check_capacity(db: Session, subject: Post | Comment, emoji: str, freed: str | None = None) -> None:
    """Raise CapacityExceededError if ``emoji`` would be one distinct emoji too many."""
    reactions = _subject_reactions(db, subject)
    if reactions.filter(Reaction.emoji == emoji).first() is not None:
        return

    distinct_count = reactions.with_entities(func.count(distinct(Reaction.emoji))).scalar() or 0
    # Replacing the only reaction carrying ``freed`` releases its slot
    if freed is not None and reactions.filter(Reaction.emoji == freed).count() == 1:
        distinct_count -= 1

    if distinct_count >= settings.MAX_DISTINCT_REACTIONS:
        logger.info("Reaction cap reached on %s %s", subject_type_of(subject), subject.id)
        raise CapacityExceededError()


def aggregate_reactions(db: Session, subject: Post | Comment) -> list[tuple[str, int]]:
    """
    Distinct emoji on ``subject`` with their counts, most used first.

    Ties keep first-use order (lowest reaction id), so the list is stable
    between calls as long as counts do not change.
    """
    total = func.count(Reaction.id).label("total")
    rows = (
        _subject_reactions(db, subject)
        .with_entities(Reaction.emoji, total)
        .group_by(Reaction.emoji)
        .order_by(total.desc(), func.min(Reaction.id))
        .all()
    )
    return [(emoji, n) for emoji, n in rows]


def user_emoji(db: Session, subject: Post | Comment, user: User | None) -> str | None:
    if user is None:
        return None
    row = _subject_reactions(db, subject).filter(Reaction.user_id == user.id).first()
    return row.emoji if row else None


def list_reactors(
    db: Session,
    subject: Post | Comment,
    emoji: str | None = None,
    cursor: str | None = None,
) -> ReactorPage:
    """
    Users who reacted with ``emoji`` (default: the most used one), newest first.

    Pages hold ``REACTIONS_PAGE_SIZE`` users. A subject without reactions
    gives an empty page and no cursor.
    """
    selected = emoji
    if not selected:
        aggregate = aggregate_reactions(db, subject)
        selected = aggregate[0][0] if aggregate else None

    if selected is None:
        return ReactorPage(selected_emoji=None, users=[], next_cursor=None)

    query = _subject_reactions(db, subject).filter(Reaction.emoji == selected).options(joinedload(Reaction.user))
    rows, next_cursor = paginate_desc(query, Reaction, cursor, settings.REACTIONS_PAGE_SIZE)
    return ReactorPage(
        selected_emoji=selected,
        users=[row.user for row in rows],
        next_cursor=next_cursor,
    )
