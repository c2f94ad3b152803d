"""Customer-facing order endpoints.

Every route here is scoped to the calling customer: orders belonging to
someone else answer 404, exactly like orders that do not exist.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..lifecycle import OrderLifecycleManager
from ..payments import build_payment_instructions
from ...data.database import get_db
from ...data.models import UserProfile
from ...schemas.io_models import UserProfileOut
from ...schemas.order_models import OrderCreate, OrderEventOut, OrderOut, OrderWithEvents
from ...utils.logger import get_logger

logger = get_logger()

router = APIRouter()


def get_lifecycle(db: Session = Depends(get_db)) -> OrderLifecycleManager:
    return OrderLifecycleManager(db)


@router.post("/orders")
async def create_order(
    body: OrderCreate,
    user: UserProfile = Depends(get_current_user),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    order = lifecycle.create_order(
        customer_id=user.id,
        cake_config=body.cake_config,
        delivery_date=body.delivery_date,
        delivery_time=body.delivery_time,
        delivery_address=body.delivery_address,
        special_instructions=body.special_instructions,
        total_amount=body.total_amount,
    )
    return {
        "success": True,
        "order": OrderOut.model_validate(order),
        "payment_instructions": build_payment_instructions(order),
    }


@router.get("/orders")
async def list_my_orders(
    status: Optional[str] = None,
    user: UserProfile = Depends(get_current_user),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    orders = lifecycle.list_orders_for_customer(user.id, status)
    logger.info(f"Order list request: {len(orders)} orders for customer {user.id}")
    return {"success": True, "orders": [OrderWithEvents.model_validate(o) for o in orders]}


@router.get("/orders/{order_id}")
async def get_my_order(
    order_id: str,
    user: UserProfile = Depends(get_current_user),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    order = lifecycle.get_order_for_customer(order_id, user.id)
    return {"success": True, "data": OrderWithEvents.model_validate(order)}


@router.get("/orders/{order_id}/events")
async def list_my_order_events(
    order_id: str,
    user: UserProfile = Depends(get_current_user),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    lifecycle.get_order_for_customer(order_id, user.id)
    events = lifecycle.list_events_for_order(order_id)
    return {"success": True, "data": [OrderEventOut.model_validate(e) for e in events]}


@router.post("/orders/{order_id}/confirm-payment")
async def confirm_payment(
    order_id: str,
    user: UserProfile = Depends(get_current_user),
    lifecycle: OrderLifecycleManager = Depends(get_lifecycle),
):
    order = lifecycle.confirm_payment(order_id, user.id)
    return {
        "success": True,
        "message": "Payment confirmed successfully. The bakery will contact you to confirm your order.",
        "order": OrderOut.model_validate(order),
    }


@router.get("/profile")
async def get_profile(user: UserProfile = Depends(get_current_user)):
    return {"success": True, "data": UserProfileOut.model_validate(user)}
