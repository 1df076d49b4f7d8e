"""
Per-request page context.

Data every screen needs (who is signed in, what they may do, site switches)
is assembled here from explicit inputs and returned as a value, instead of
being shared implicitly with every response.
"""

from sqlalchemy.orm import Session

from tertulia.config import Settings
from tertulia.models.user import User
from tertulia.schemas.page_context import AuthContext, PageContext
from tertulia.services import site_settings
from tertulia.services.presenters import present_user


def build_page_context(db: Session, user: User | None, settings: Settings) -> PageContext:
    return PageContext(
        name=settings.APP_NAME,
        auth=AuthContext(user=present_user(db, user, user) if user is not None else None),
        capabilities=sorted(user.capability_names) if user is not None else [],
        is_moderator=user is not None and user.is_moderator,
        registration_open=site_settings.registration_open(db, settings),
        max_distinct_reactions=settings.MAX_DISTINCT_REACTIONS,
    )
