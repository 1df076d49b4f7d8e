from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.sql import func

from tertulia.database import Base


class SiteSetting(Base):
    """
    Admin-editable site switches. There is at most one row; until an admin
    saves the first one, values come from the environment (config.Settings).
    """

    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, index=True)
    registration_open = Column(Boolean, nullable=False)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
