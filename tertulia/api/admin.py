"""
Admin panel endpoints.

Moderators (role mod or admin) manage accounts (activation and
capabilities) and work the report queue. Only admins change roles, manage
invitations and edit site settings.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tertulia.api.deps import require_admin, require_moderator
from tertulia.config import settings
from tertulia.core.events import INVITATION_DELETED
from tertulia.core.time import utcnow
from tertulia.database import get_db
from tertulia.models.comment import Comment
from tertulia.models.invitation import Invitation
from tertulia.models.post import Post
from tertulia.models.report import Report
from tertulia.models.user import User
from tertulia.models.user_capability import UserCapability
from tertulia.schemas.entry import StatusResponse
from tertulia.schemas.invitation import InvitationCreate, InvitationResponse
from tertulia.schemas.report import ReportDetail, ReportList, ReportResponse, ReportStatus, ReportUpdate
from tertulia.schemas.site import SiteSettingsResponse, SiteSettingsUpdate
from tertulia.schemas.user import AdminUserUpdate, UserResponse
from tertulia.services import report_service, site_settings
from tertulia.services.presenters import present_comment, present_post, present_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


# ── Users ─────────────────────────────────────────────────────────────────────


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    q: str | None = Query(None, description="Partial username or email"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> list[UserResponse]:
    query = db.query(User)
    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(User.username.ilike(pattern) | User.email.ilike(pattern))
    users = query.order_by(User.id).offset(offset).limit(limit).all()
    return [present_user(db, u, moderator) for u in users]


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    updates: AdminUserUpdate,
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> UserResponse:
    """
    Change a user's role, active flag or capability set.

    Nobody edits themselves here, moderators cannot touch admins, and only
    admins may change roles.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if user.id == moderator.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot edit your own account here")
    if user.is_admin and not moderator.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")

    if updates.role is not None and updates.role != user.role:
        if not moderator.is_admin:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
        user.role = updates.role

    if updates.is_active is not None:
        user.is_active = updates.is_active

    if updates.capabilities is not None:
        wanted = {c.value for c in updates.capabilities}
        user.capabilities = [c for c in user.capabilities if c.name in wanted]
        have = user.capability_names
        user.capabilities.extend(UserCapability(name=name) for name in sorted(wanted - have))

    db.commit()
    db.refresh(user)
    logger.info("User %s updated by %s: %s", user.id, moderator.id, updates.model_dump(exclude_none=True))
    return present_user(db, user, moderator)


# ── Invitations ───────────────────────────────────────────────────────────────


@router.get("/invitations", response_model=list[InvitationResponse])
async def list_invitations(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[InvitationResponse]:
    invitations = db.query(Invitation).order_by(Invitation.id.desc()).all()
    return [InvitationResponse.model_validate(i) for i in invitations]


@router.post("/invitations", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    body: InvitationCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> InvitationResponse:
    """Issue a single-use registration token."""
    hours = settings.INVITATION_EXPIRE_HOURS if body.expires_in_hours is None else body.expires_in_hours

    invitation = Invitation(
        token=Invitation.generate_token(),
        created_by_id=admin.id,
        expires_at=utcnow() + timedelta(hours=hours) if hours else None,
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    logger.info("Admin %s created invitation %s", admin.id, invitation.id)
    return InvitationResponse.model_validate(invitation)


@router.delete("/invitations/{invitation_id}", response_model=StatusResponse)
async def delete_invitation(
    invitation_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Revoke an unused invitation. Used ones are kept as a record."""
    invitation = db.query(Invitation).filter(Invitation.id == invitation_id).first()
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    if invitation.is_used:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Invitation has already been used")

    db.delete(invitation)
    db.commit()
    return StatusResponse(status=INVITATION_DELETED, id=invitation_id)


# ── Reports ───────────────────────────────────────────────────────────────────


def _get_report_or_404(report_id: int, db: Session) -> Report:
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report


def _present_report_detail(db: Session, report: Report, moderator: User) -> ReportDetail:
    detail = ReportDetail(
        **ReportResponse.model_validate(report).model_dump(),
        reporter=present_user(db, report.reporter, moderator),
    )
    subject = report_service.find_report_subject(db, report)
    if isinstance(subject, Post):
        detail.post = present_post(db, subject, moderator)
    elif isinstance(subject, Comment):
        detail.comment = present_comment(db, subject, moderator)
    elif isinstance(subject, User):
        detail.user = present_user(db, subject, moderator)
    return detail


@router.get("/reports", response_model=ReportList)
async def list_reports(
    report_status: ReportStatus | None = Query(None, alias="status"),
    cursor: str | None = Query(None),
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> ReportList:
    """The moderation queue, newest first, optionally filtered by status."""
    reports, next_cursor = report_service.list_reports(db, status=report_status, cursor=cursor)
    return ReportList(
        reports=[ReportResponse.model_validate(r) for r in reports],
        next_cursor=next_cursor,
    )


@router.get("/reports/{report_id}", response_model=ReportDetail)
async def get_report(
    report_id: int,
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> ReportDetail:
    report = _get_report_or_404(report_id, db)
    return _present_report_detail(db, report, moderator)


@router.patch("/reports/{report_id}", response_model=ReportDetail)
async def update_report(
    report_id: int,
    updates: ReportUpdate,
    moderator: User = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> ReportDetail:
    """Resolve, dismiss or reopen a report."""
    report = _get_report_or_404(report_id, db)
    report = report_service.set_report_status(db, report, moderator, updates.status, updates.resolution_note)
    return _present_report_detail(db, report, moderator)


# ── Site ──────────────────────────────────────────────────────────────────────


@router.get("/site", response_model=SiteSettingsResponse)
async def get_site(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SiteSettingsResponse:
    row = site_settings.get_site_setting(db)
    return SiteSettingsResponse(
        registration_open=site_settings.registration_open(db, settings),
        updated_at=row.updated_at if row is not None else None,
    )


@router.patch("/site", response_model=SiteSettingsResponse)
async def update_site(
    body: SiteSettingsUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SiteSettingsResponse:
    """Overrides the environment defaults from then on."""
    row = site_settings.update_site_settings(db, admin, body.registration_open)
    return SiteSettingsResponse(registration_open=row.registration_open, updated_at=row.updated_at)
