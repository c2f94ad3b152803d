"""Admin endpoints: order triage and transitions, order events, customers, catalog."""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from ..lifecycle import URGENCY_RANK, OrderLifecycleManager, Urgency, bakery_now, get_urgency
from .orders import get_lifecycle
from ...data.database import get_db
from ...data.models import Cake, Order, UserProfile
from ...schemas.io_models import CakeCreate, CakeOut, CakeUpdate, CustomerWithStats, UserProfileOut
from ...schemas.order_models import AdminOrderOut, OrderEventCreate, OrderEventOut, OrderOut, OrderUpdate
from ...utils.logger import get_logger

logger = get_logger()

router = APIRouter(prefix="/admin")

NULLABLE_CAKE_FIELDS = frozenset(["description", "category"])


def _admin_order(order: Order, now) -> AdminOrderOut:
    out = AdminOrderOut.model_validate(order)
    out.urgency = get_urgency(order, now).value
    return out


@router.get("/orders")
async def list_orders(
    status: Optional[str] = None,
    urgency: Optional[str] = None,
    admin: UserProfile = Depends(require_admin),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    """All orders, most pressing delivery first, optionally filtered by status and urgency."""
    if urgency is not None and urgency not in Urgency.__members__:
        raise ValidationError(f"Invalid urgency '{urgency}'", ["urgency"])

    now = bakery_now()
    orders = [_admin_order(o, now) for o in lifecycle.list_orders(status)]
    if urgency:
        orders = [o for o in orders if o.urgency == urgency]
    orders.sort(key=lambda o: (URGENCY_RANK[Urgency(o.urgency)], o.delivery_date))
    return {"success": True, "data": orders}


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    admin: UserProfile = Depends(require_admin),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    order = lifecycle.get_order(order_id)
    return {"success": True, "data": _admin_order(order, bakery_now())}


@router.patch("/orders/{order_id}")
async def update_order(
    order_id: str,
    body: OrderUpdate,
    admin: UserProfile = Depends(require_admin),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    order = lifecycle.update_order(
        order_id,
        status=body.status,
        payment_status=body.payment_status,
        acting_admin_id=admin.id,
    )
    return {"success": True, "data": OrderOut.model_validate(order)}


@router.get("/orders/{order_id}/events")
async def list_order_events(
    order_id: str,
    admin: UserProfile = Depends(require_admin),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    events = lifecycle.list_events_for_order(order_id)
    return {"success": True, "data": [OrderEventOut.model_validate(e) for e in events]}


@router.post("/orders/{order_id}/events")
async def create_order_event(
    order_id: str,
    body: OrderEventCreate,
    admin: UserProfile = Depends(require_admin),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    event = lifecycle.append_event(
        order_id,
        body.event_type,
        body.description,
        notes=body.notes,
        estimated_completion=body.estimated_completion,
        created_by=admin.id,
    )
    return {"success": True, "data": OrderEventOut.model_validate(event)}


@router.get("/customers")
async def list_customers(admin: UserProfile = Depends(require_admin), db: Session = Depends(get_db)):
    """Customer profiles with their order count, spend and most recent order."""
    stats = {
        customer_id: (count, spent, last)
        for customer_id, count, spent, last in db.query(
            Order.customer_id,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0.0),
            func.max(Order.created_at),
        ).group_by(Order.customer_id)
    }

    customers = []
    for profile in db.query(UserProfile).order_by(UserProfile.created_at.desc()).all():
        out = CustomerWithStats.model_validate(profile)
        count, spent, last = stats.get(profile.id, (0, 0.0, None))
        out.total_orders = count
        out.total_spent = float(spent)
        out.last_order_date = last
        customers.append(out)
    return {"success": True, "data": customers}


@router.get("/customers/{customer_id}")
async def get_customer(
    customer_id: str,
    admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    profile = db.query(UserProfile).filter(UserProfile.id == customer_id).first()
    if profile is None:
        raise NotFoundError("Customer not found")
    orders = db.query(Order).filter(Order.customer_id == customer_id).order_by(Order.created_at.desc()).all()
    return {
        "success": True,
        "data": {
            "profile": UserProfileOut.model_validate(profile),
            "orders": [OrderOut.model_validate(o) for o in orders],
        },
    }


@router.post("/cakes")
async def create_cake(body: CakeCreate, admin: UserProfile = Depends(require_admin), db: Session = Depends(get_db)):
    cake = Cake(**body.model_dump())
    db.add(cake)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"A cake named '{body.name}' already exists") from e
    db.refresh(cake)
    logger.info(f"Catalog: added cake #{cake.id} {cake.name}")
    return {"success": True, "data": CakeOut.model_validate(cake)}


@router.patch("/cakes/{cake_id}")
async def update_cake(
    cake_id: int,
    body: CakeUpdate,
    admin: UserProfile = Depends(require_admin),
    db: Session = Depends(get_db),
):
    cake = db.query(Cake).filter(Cake.id == cake_id).first()
    if cake is None:
        raise NotFoundError("Cake not found")

    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No valid fields to update", list(CakeUpdate.model_fields))
    nulls = [key for key, value in changes.items() if value is None and key not in NULLABLE_CAKE_FIELDS]
    if nulls:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}", nulls)

    name = changes.get("name")
    if name is not None and db.query(Cake.id).filter(Cake.name == name, Cake.id != cake_id).first():
        raise ConflictError(f"A cake named '{name}' already exists")

    for key, value in changes.items():
        setattr(cake, key, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if name is not None:
            # lost a race with another rename
            raise ConflictError(f"A cake named '{name}' already exists") from e
        logger.error(f"Catalog: failed to update cake #{cake_id}: {e}")
        raise PersistenceError("Failed to update cake") from e
    db.refresh(cake)
    return {"success": True, "data": CakeOut.model_validate(cake)}
