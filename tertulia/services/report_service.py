"""
Moderation reports.

Any signed-in user may report a post, comment or account they can see, once
while the previous report is still pending. Moderators work the queue newest
first and close each report as resolved or dismissed (or reopen it).
"""

import logging

from sqlalchemy.orm import Session

from tertulia.config import settings
from tertulia.core.errors import ConflictError, NotFoundError, ValidationError
from tertulia.core.time import utcnow
from tertulia.models.comment import Comment
from tertulia.models.post import Post
from tertulia.models.report import REPORT_PENDING, REPORTABLE_USER, Report
from tertulia.models.user import User
from tertulia.services import policy
from tertulia.services.pagination import paginate_desc
from tertulia.services.reaction_service import resolve_subject

logger = logging.getLogger(__name__)


def resolve_report_subject(db: Session, subject_type: str, subject_id: int) -> Post | Comment | User:
    if subject_type == REPORTABLE_USER:
        user = db.query(User).filter(User.id == subject_id).first()
        if user is None:
            raise NotFoundError("User not found.")
        return user
    return resolve_subject(db, subject_type, subject_id)


def find_report_subject(db: Session, report: Report) -> Post | Comment | User | None:
    """The reported object, or None when it has been deleted since."""
    try:
        return resolve_report_subject(db, report.subject_type, report.subject_id)
    except NotFoundError:
        return None


def file_report(db: Session, reporter: User, subject_type: str, subject_id: int, reason: str) -> Report:
    subject = resolve_report_subject(db, subject_type, subject_id)

    if isinstance(subject, User):
        owner_id = subject.id
    else:
        post = subject.post if isinstance(subject, Comment) else subject
        # Content the reporter cannot see is reported as missing
        if not policy.can_view(db, reporter, post):
            raise NotFoundError(f"{subject_type.capitalize()} not found.")
        owner_id = subject.user_id

    if owner_id == reporter.id:
        raise ValidationError("You cannot report yourself or your own content.")

    duplicate = (
        db.query(Report.id)
        .filter(
            Report.reporter_id == reporter.id,
            Report.subject_type == subject_type,
            Report.subject_id == subject_id,
            Report.status == REPORT_PENDING,
        )
        .first()
    )
    if duplicate is not None:
        raise ConflictError("You already reported this and it is still pending.")

    report = Report(
        reporter_id=reporter.id,
        subject_type=subject_type,
        subject_id=subject_id,
        reason=reason,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("User %s reported %s %s (report %s)", reporter.id, subject_type, subject_id, report.id)
    return report


def list_reports(db: Session, status: str | None = None, cursor: str | None = None) -> tuple[list[Report], str | None]:
    query = db.query(Report)
    if status:
        query = query.filter(Report.status == status)
    return paginate_desc(query, Report, cursor, settings.REPORTS_PAGE_SIZE)


def set_report_status(db: Session, report: Report, moderator: User, status: str, note: str | None = None) -> Report:
    """Set the report's status. Reopening (back to pending) clears the resolution."""
    report.status = status
    report.resolution_note = note
    if status == REPORT_PENDING:
        report.resolved_by_id = None
        report.resolved_at = None
    else:
        report.resolved_by_id = moderator.id
        report.resolved_at = utcnow()
    db.commit()
    db.refresh(report)
    logger.info("Moderator %s set report %s to %s", moderator.id, report.id, status)
    return report
