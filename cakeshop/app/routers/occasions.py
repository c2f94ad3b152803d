"""Customer occasions: dates worth a cake, with reminder lead time and cake preferences.

Occasions are private to their owner; someone else's occasion answers 404.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..lifecycle import bakery_now
from ...data.database import get_db
from ...data.models import Occasion, UserProfile
from ...schemas.io_models import OccasionCreate, OccasionOut, OccasionUpdate
from ...utils.logger import get_logger

logger = get_logger()

router = APIRouter(prefix="/occasions")

NULLABLE_OCCASION_FIELDS = frozenset(["description", "notes"])


def _occasion_out(occasion: Occasion, today: date) -> OccasionOut:
    out = OccasionOut.model_validate(occasion)
    out.days_until = (occasion.date - today).days
    return out


def _get_owned(db: Session, occasion_id: str, user: UserProfile) -> Occasion:
    occasion = (
        db.query(Occasion)
        .filter(Occasion.id == occasion_id, Occasion.user_id == user.id)
        .first()
    )
    if occasion is None:
        raise NotFoundError("Occasion not found")
    return occasion


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}")
        raise PersistenceError(f"Failed to {action}") from e


@router.get("")
async def list_occasions(
    upcoming: bool = False,
    limit: Optional[int] = Query(None, ge=1),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The caller's occasions, soonest date first."""
    today = bakery_now().date()
    query = db.query(Occasion).filter(Occasion.user_id == user.id)
    if upcoming:
        query = query.filter(Occasion.date >= today)
    query = query.order_by(Occasion.date.asc(), Occasion.created_at.asc())
    if limit:
        query = query.limit(limit)
    return {"success": True, "data": [_occasion_out(o, today) for o in query.all()]}


@router.post("")
async def create_occasion(
    body: OccasionCreate,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(mode="json", exclude={"date"})
    occasion = Occasion(user_id=user.id, date=body.date, **fields)
    db.add(occasion)
    _commit(db, "create occasion")
    db.refresh(occasion)
    logger.info(f"Occasion {occasion.id} ({occasion.category}) added for customer {user.id}")
    return {"success": True, "data": _occasion_out(occasion, bakery_now().date())}


@router.get("/{occasion_id}")
async def get_occasion(
    occasion_id: str,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    occasion = _get_owned(db, occasion_id, user)
    return {"success": True, "data": _occasion_out(occasion, bakery_now().date())}


@router.patch("/{occasion_id}")
async def update_occasion(
    occasion_id: str,
    body: OccasionUpdate,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    occasion = _get_owned(db, occasion_id, user)

    changes = body.model_dump(mode="json", exclude_unset=True)
    if not changes:
        raise ValidationError("No valid fields to update", list(OccasionUpdate.model_fields))
    nulls = [key for key, value in changes.items() if value is None and key not in NULLABLE_OCCASION_FIELDS]
    if nulls:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}", nulls)

    if "date" in changes:
        changes["date"] = body.date
    for key, value in changes.items():
        setattr(occasion, key, value)
    _commit(db, "update occasion")
    db.refresh(occasion)
    return {"success": True, "data": _occasion_out(occasion, bakery_now().date())}


@router.delete("/{occasion_id}")
async def delete_occasion(
    occasion_id: str,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    occasion = _get_owned(db, occasion_id, user)
    db.delete(occasion)
    _commit(db, "delete occasion")
    return {"success": True, "message": "Occasion deleted successfully"}
