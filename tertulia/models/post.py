from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tertulia.core.time import utcnow
from tertulia.database import Base

# Post visibility values
VISIBILITY_PUBLIC = "public"
VISIBILITY_FOLLOWING = "following"  # followers of the author only
VISIBILITY_PRIVATE = "private"  # the author only


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    visibility = Column(String(20), nullable=False, default=VISIBILITY_PUBLIC)
    # Closed posts accept no new comments except from their author
    is_closed = Column(Boolean, default=False, nullable=False)
    # Set client-side with microseconds: the feed cursor compares on it
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="posts")
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )
    # Reactions are polymorphic (subject_type, subject_id) so there is no FK;
    # the ORM cascade is what removes them with the post.
    reactions = relationship(
        "Reaction",
        primaryjoin="and_(foreign(Reaction.subject_id) == Post.id, Reaction.subject_type == 'post')",
        cascade="all",
        overlaps="reactions",
    )
