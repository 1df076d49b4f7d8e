from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from tertulia.core.time import utcnow
from tertulia.database import Base

REPORT_PENDING = "pending"

REPORTABLE_USER = "user"


class Report(Base):
    """A user's complaint about a post, comment or account, worked off by moderators."""

    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # subject_type: "post" | "comment" | "user"; no FK, the subject may be deleted later
    subject_type = Column(String(20), nullable=False)
    subject_id = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    # status: "pending" | "resolved" | "dismissed"
    status = Column(String(20), nullable=False, default=REPORT_PENDING)
    resolution_note = Column(Text, nullable=True)
    resolved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    # Client-side with microseconds, the moderation queue pages on it
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    reporter = relationship("User", foreign_keys=[reporter_id])

    __table_args__ = (Index("ix_reports_subject", "subject_type", "subject_id"),)
