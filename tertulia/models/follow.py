from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tertulia.database import Base


class Follow(Base):
    """follower_id follows followed_id."""

    __tablename__ = "follows"

    id = Column(Integer, primary_key=True, index=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    followed_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    follower = relationship("User", foreign_keys=[follower_id])
    followed = relationship("User", foreign_keys=[followed_id])

    __table_args__ = (UniqueConstraint("follower_id", "followed_id", name="unique_follow_pair"),)

    @classmethod
    def exists(cls, db, follower_id: int, followed_id: int) -> bool:
        return (
            db.query(cls.id).filter(cls.follower_id == follower_id, cls.followed_id == followed_id).first()
            is not None
        )
