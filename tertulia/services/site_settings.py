"""Site switches editable from the admin panel, with environment defaults."""

import logging

from sqlalchemy.orm import Session

from tertulia.config import Settings, settings
from tertulia.models.site_setting import SiteSetting
from tertulia.models.user import User

logger = logging.getLogger(__name__)


def get_site_setting(db: Session) -> SiteSetting | None:
    return db.query(SiteSetting).order_by(SiteSetting.id).first()


def registration_open(db: Session, config: Settings = settings) -> bool:
    row = get_site_setting(db)
    return row.registration_open if row is not None else config.REGISTRATION_OPEN


def update_site_settings(db: Session, admin: User, registration_open: bool) -> SiteSetting:
    row = get_site_setting(db)
    if row is None:
        row = SiteSetting(registration_open=registration_open)
        db.add(row)
    row.registration_open = registration_open
    row.updated_by_id = admin.id
    db.commit()
    db.refresh(row)
    logger.info("Admin %s set registration_open=%s", admin.id, registration_open)
    return row
