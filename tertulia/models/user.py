from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tertulia.core.capabilities import MODERATOR_ROLES, ROLE_ADMIN, ROLE_USER, Capability
from tertulia.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    avatar_url = Column(String(500), nullable=True)
    # role: "user" | "mod" | "admin"; the first account registered is the admin
    role = Column(String(10), nullable=False, default=ROLE_USER)
    # Deactivated accounts keep their content but cannot authenticate
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    capabilities = relationship(
        "UserCapability",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    posts = relationship("Post", back_populates="user")

    @property
    def capability_names(self) -> set[str]:
        return {c.name for c in self.capabilities}

    def has_capability(self, capability: Capability) -> bool:
        return Capability(capability).value in self.capability_names

    @property
    def is_moderator(self) -> bool:
        return self.role in MODERATOR_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
