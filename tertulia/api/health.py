import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tertulia.config import settings
from tertulia.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Liveness plus a round trip to the database; 503 when the database is down."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": settings.APP_NAME, "database": "disconnected"},
        )
    return {"status": "healthy", "service": settings.APP_NAME, "database": "connected"}
