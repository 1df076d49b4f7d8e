from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint, and_, or_
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tertulia.database import Base


class UserBlock(Base):
    """blocker_id has blocked blocked_id. Blocks are directional."""

    __tablename__ = "user_blocks"

    id = Column(Integer, primary_key=True, index=True)
    blocker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    blocked_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    blocker = relationship("User", foreign_keys=[blocker_id])
    blocked = relationship("User", foreign_keys=[blocked_id])

    __table_args__ = (UniqueConstraint("blocker_id", "blocked_id", name="unique_block_pair"),)

    @classmethod
    def has_blocked(cls, db, blocker_id: int, blocked_id: int) -> bool:
        return (
            db.query(cls.id).filter(cls.blocker_id == blocker_id, cls.blocked_id == blocked_id).first()
            is not None
        )

    @classmethod
    def exists_between(cls, db, a: int, b: int) -> bool:
        """True when either user has blocked the other."""
        return (
            db.query(cls.id)
            .filter(
                or_(
                    and_(cls.blocker_id == a, cls.blocked_id == b),
                    and_(cls.blocker_id == b, cls.blocked_id == a),
                )
            )
            .first()
            is not None
        )
