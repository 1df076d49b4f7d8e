from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tertulia.api.deps import get_optional_user
from tertulia.config import settings
from tertulia.database import get_db
from tertulia.models.user import User
from tertulia.schemas.page_context import PageContext
from tertulia.services.page_context import build_page_context

router = APIRouter(tags=["context"])


@router.get("/context", response_model=PageContext)
async def page_context(
    current_user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> PageContext:
    """Shared data for the current page: signed-in user, capabilities, site switches."""
    return build_page_context(db, current_user, settings)
