from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tertulia.core.time import utcnow
from tertulia.database import Base

SUBJECT_POST = "post"
SUBJECT_COMMENT = "comment"
SUBJECT_TYPES = (SUBJECT_POST, SUBJECT_COMMENT)


class Reaction(Base):
    __tablename__ = "reactions"

    id = Column(Integer, primary_key=True, index=True)
    # subject_type: "post" | "comment"
    subject_type = Column(String(20), nullable=False)
    subject_id = Column(Integer, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # A single emoji grapheme, possibly several codepoints (e.g. 👍🏽, 👨‍👩‍👧)
    emoji = Column(String(50), nullable=False)
    # Set client-side with microseconds: the reactor cursor compares on it
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User")

    __table_args__ = (
        # One reaction per user per subject; a lost create race trips this
        UniqueConstraint("subject_type", "subject_id", "user_id", name="unique_user_reaction_per_subject"),
        Index("ix_reactions_subject_emoji", "subject_type", "subject_id", "emoji"),
    )
