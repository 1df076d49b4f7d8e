from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tertulia.database import Base


class UserCapability(Base):
    """One granted capability (see core.capabilities.Capability) for a user."""

    __tablename__ = "user_capabilities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)

    user = relationship("User", back_populates="capabilities")

    __table_args__ = (UniqueConstraint("user_id", "name", name="unique_user_capability"),)
