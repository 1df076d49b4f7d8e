import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user
from tertulia.config import settings
from tertulia.core.capabilities import DEFAULT_CAPABILITIES, ROLE_ADMIN, ROLE_USER
from tertulia.core.time import utcnow
from tertulia.database import get_db
from tertulia.models.invitation import Invitation
from tertulia.models.user import User
from tertulia.models.user_capability import UserCapability
from tertulia.schemas.user import Token, UserCreate, UserLogin, UserResponse
from tertulia.services import auth_service, site_settings
from tertulia.services.presenters import present_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _get_usable_invitation(token: str, db: Session) -> Invitation:
    """Lock and return an unused, unexpired invitation; 404 or 410 otherwise."""
    invitation = db.query(Invitation).filter(Invitation.token == token).with_for_update().first()
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    if invitation.is_used:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="This invitation has already been used")
    if invitation.is_expired():
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="This invitation has expired")
    return invitation


def _issue_token(db: Session, user: User) -> Token:
    lifetime = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return Token(
        access_token=auth_service.create_access_token(user, expires_delta=lifetime),
        expires_in=int(lifetime.total_seconds()),
        user=present_user(db, user, user),
    )


@router.post("/register", response_model=Token)
async def register(user_in: UserCreate, db: Session = Depends(get_db)) -> Token:
    """
    Create an account. The first account on a deployment becomes the admin.

    While registration is closed (admin site settings, else REGISTRATION_OPEN), an invitation token is required; a token
    sent while registration is open is still validated and consumed.
    """
    if db.query(User).filter(User.username == user_in.username).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already registered",
        )
    if db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    is_first_user = db.query(User.id).first() is None

    invitation = None
    if user_in.invitation_token:
        invitation = _get_usable_invitation(user_in.invitation_token, db)
    elif not site_settings.registration_open(db, settings) and not is_first_user:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Registration is by invitation only",
        )

    user = User(
        username=user_in.username,
        email=user_in.email,
        hashed_password=auth_service.hash_password(user_in.password),
        role=ROLE_ADMIN if is_first_user else ROLE_USER,
    )
    user.capabilities = [UserCapability(name=c.value) for c in DEFAULT_CAPABILITIES]
    db.add(user)
    try:
        db.flush()  # get user.id
        if invitation is not None:
            invitation.used_by_id = user.id
            invitation.used_at = utcnow()
        db.commit()
    except IntegrityError as exc:
        # A concurrent registration took the username or email after the checks above
        db.rollback()
        logger.warning("Registration race lost for %s", user_in.username)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already registered",
        ) from exc
    db.refresh(user)
    logger.info("Registered user %s (%s)%s", user.id, user.role, " via invitation" if invitation else "")

    return _issue_token(db, user)


@router.post("/login", response_model=Token)
async def login(credentials: UserLogin, db: Session = Depends(get_db)) -> Token:
    user = auth_service.authenticate_user(db, credentials.username, credentials.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    return _issue_token(db, user)


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    return present_user(db, current_user, current_user, with_counts=True)
