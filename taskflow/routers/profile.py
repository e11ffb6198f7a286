from datetime import datetime
import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from ..database import get_db
from ..errors import ConflictError, ValidationFailed
from ..models import User
from ..schemas.user import UserRead, UserUpdate
from .auth import get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=UserRead)
def read_profile(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.put("", response_model=UserRead)
def update_profile(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the current user's name and/or email."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")

    email = changes.get("email")
    if email and email != current_user.email:
        taken = db.exec(
            select(User).where(User.email == email, User.id != current_user.id)
        ).first()
        if taken:
            raise ConflictError("Email already in use")

    for field, value in changes.items():
        setattr(current_user, field, value)
    current_user.updated_at = datetime.utcnow()

    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    logger.info("Updated profile for user %s", current_user.id)
    return current_user
