from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user
from tertulia.database import get_db
from tertulia.models.user import User
from tertulia.schemas.report import ReportCreate, ReportResponse
from tertulia.services import report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_in: ReportCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReportResponse:
    """Flag a post, comment or account for the moderators."""
    report = report_service.file_report(
        db,
        current_user,
        report_in.subject_type,
        report_in.subject_id,
        report_in.reason,
    )
    return ReportResponse.model_validate(report)
