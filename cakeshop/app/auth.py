"""Caller identity and role checks.

Authentication itself happens upstream; the identity provider's user id
reaches us in the ``X-User-Id`` header. Profiles are read from the store on
every request, nothing about a caller's role is cached in-process.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import AuthenticationError, AuthorizationError, PersistenceError
from ..data.database import get_db
from ..data.models import UserProfile, UserRole
from ..utils.logger import get_logger

logger = get_logger()


def find_or_create_profile(
    db: Session,
    external_id: str,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
) -> UserProfile:
    """Return the profile for an identity, creating a customer profile on first sight."""
    profile = db.query(UserProfile).filter(UserProfile.external_id == external_id).first()
    if profile:
        return profile

    profile = UserProfile(
        external_id=external_id,
        full_name=(full_name or "").strip() or "User",
        email=email,
        role=UserRole.customer,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # Another request created it first
        db.rollback()
        profile = db.query(UserProfile).filter(UserProfile.external_id == external_id).first()
        if profile is None:
            raise PersistenceError("Failed to create user profile")
        return profile
    db.refresh(profile)
    logger.info(f"[AUTH] Created customer profile {profile.id}")
    return profile


def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> UserProfile:
    if not x_user_id:
        raise AuthenticationError("Authentication required")
    return find_or_create_profile(db, x_user_id, x_user_name, x_user_email)


def require_admin(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    if user.role != UserRole.admin:
        logger.warning(f"[AUTH] Profile {user.id} denied admin access")
        raise AuthorizationError("Admin access required")
    return user
