import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from tertulia.api.deps import get_current_user, get_optional_user
from tertulia.core.capabilities import Capability
from tertulia.core.errors import ForbiddenError, ValidationError
from tertulia.core.events import BLOCK_CREATED, BLOCK_DELETED, FOLLOW_CREATED, FOLLOW_DELETED, PASSWORD_UPDATED
from tertulia.database import get_db
from tertulia.models.follow import Follow
from tertulia.models.user import User
from tertulia.models.user_block import UserBlock
from tertulia.schemas.entry import StatusResponse
from tertulia.schemas.user import PasswordUpdate, UserResponse, UserUpdate
from tertulia.services import auth_service, policy
from tertulia.services.presenters import present_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(user_id: int, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.patch("/me", response_model=UserResponse)
async def update_me(
    updates: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    update_data = updates.model_dump(exclude_unset=True)

    if "username" in update_data:
        policy.authorize(
            policy.has_capability(current_user, Capability.UPDATE_USERNAME),
            "You may not change your username.",
        )
        taken = (
            db.query(User)
            .filter(User.username == update_data["username"], User.id != current_user.id)
            .first()
        )
        if taken:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already registered")

    if "avatar_url" in update_data:
        policy.authorize(
            policy.has_capability(current_user, Capability.UPDATE_AVATAR),
            "You may not change your avatar.",
        )

    for field, value in update_data.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return present_user(db, current_user, current_user, with_counts=True)


@router.put("/me/password", response_model=StatusResponse)
async def update_password(
    body: PasswordUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Change the signed-in user's password. Issued tokens stay valid until they expire."""
    if not auth_service.verify_password(body.current_password, current_user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")

    current_user.hashed_password = auth_service.hash_password(body.password)
    db.commit()
    logger.info("User %s changed their password", current_user.id)
    return StatusResponse(status=PASSWORD_UPDATED, id=current_user.id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    user = _get_user_or_404(user_id, db)
    return present_user(db, user, viewer, with_counts=True)


@router.post("/{user_id}/follow", response_model=StatusResponse)
async def toggle_follow(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """Follow the user, or unfollow if already following."""
    target = _get_user_or_404(user_id, db)
    if target.id == current_user.id:
        raise ValidationError("You cannot follow yourself.")

    existing = (
        db.query(Follow)
        .filter(Follow.follower_id == current_user.id, Follow.followed_id == target.id)
        .first()
    )
    if existing:
        db.delete(existing)
        db.commit()
        return StatusResponse(status=FOLLOW_DELETED, id=target.id)

    if policy.is_blocked_either_way(db, current_user, target):
        raise ForbiddenError("You cannot follow this user.")

    db.add(Follow(follower_id=current_user.id, followed_id=target.id))
    db.commit()
    logger.info("User %s followed %s", current_user.id, target.id)
    return StatusResponse(status=FOLLOW_CREATED, id=target.id)


@router.post("/{user_id}/block", response_model=StatusResponse)
async def toggle_block(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StatusResponse:
    """
    Block the user, or unblock if already blocked.
    Blocking also drops any follow between the two users, both directions.
    """
    target = _get_user_or_404(user_id, db)
    if target.id == current_user.id:
        raise ValidationError("You cannot block yourself.")

    existing = (
        db.query(UserBlock)
        .filter(UserBlock.blocker_id == current_user.id, UserBlock.blocked_id == target.id)
        .first()
    )
    if existing:
        db.delete(existing)
        db.commit()
        return StatusResponse(status=BLOCK_DELETED, id=target.id)

    db.add(UserBlock(blocker_id=current_user.id, blocked_id=target.id))
    db.query(Follow).filter(
        or_(
            (Follow.follower_id == current_user.id) & (Follow.followed_id == target.id),
            (Follow.follower_id == target.id) & (Follow.followed_id == current_user.id),
        )
    ).delete(synchronize_session=False)
    db.commit()
    logger.info("User %s blocked %s", current_user.id, target.id)
    return StatusResponse(status=BLOCK_CREATED, id=target.id)


@router.get("/{user_id}/followers", response_model=list[UserResponse])
async def list_followers(
    user_id: int,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> list[UserResponse]:
    _get_user_or_404(user_id, db)
    users = (
        db.query(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.followed_id == user_id)
        .order_by(Follow.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [present_user(db, u, viewer) for u in users]


@router.get("/{user_id}/following", response_model=list[UserResponse])
async def list_following(
    user_id: int,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> list[UserResponse]:
    _get_user_or_404(user_id, db)
    users = (
        db.query(User)
        .join(Follow, Follow.followed_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [present_user(db, u, viewer) for u in users]
