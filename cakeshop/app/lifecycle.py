"""Order lifecycle: creation, status / payment-status transitions and the audit log.

Every transition mutates the order and appends its OrderEvent inside the same
session transaction, so the two are committed (or rolled back) together.
Orders carry a version counter; a writer holding a stale copy of an order gets
a ConflictError instead of silently overwriting a concurrent change.
"""
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import pytz
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .config import Config
from .errors import CakeShopError, ConflictError, NotFoundError, PersistenceError, ValidationError
from .pricing import compute_price
from ..data.models import Order, OrderEvent, OrderStatus, PaymentStatus
from ..schemas.order_models import CakeConfiguration, DeliveryAddress
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger()

STATUS_FLOW = [
    OrderStatus.pending,
    OrderStatus.confirmed,
    OrderStatus.preparing,
    OrderStatus.baking,
    OrderStatus.decorating,
    OrderStatus.ready,
    OrderStatus.out_for_delivery,
    OrderStatus.delivered,
]
TERMINAL_STATUSES = frozenset([OrderStatus.delivered, OrderStatus.cancelled])

PAYMENT_FLOW = {
    PaymentStatus.pending: {PaymentStatus.paid, PaymentStatus.failed},
    PaymentStatus.paid: {PaymentStatus.refunded, PaymentStatus.failed},
    PaymentStatus.refunded: {PaymentStatus.failed},
    PaymentStatus.failed: set(),
}


class Urgency(str, Enum):
    overdue = "overdue"
    today = "today"
    tomorrow = "tomorrow"
    urgent = "urgent"
    normal = "normal"

URGENCY_RANK = {u: i for i, u in enumerate(Urgency)}


def bakery_now() -> datetime:
    """Current wall-clock time in the bakery's timezone."""
    return datetime.now(pytz.timezone(Config.BAKERY_TIMEZONE))


def _as_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def get_urgency(order: Any, now: Union[date, datetime]) -> Urgency:
    """Classify how close an order's delivery day is to ``now``'s calendar day.

    Negative day difference is overdue, 0 today, 1 tomorrow, 2 urgent,
    anything later normal.
    """
    delivery = order.get("delivery_date") if isinstance(order, dict) else getattr(order, "delivery_date", None)
    if delivery is None:
        return Urgency.normal
    days_diff = (_as_date(delivery) - _as_date(now)).days

    if days_diff < 0:
        return Urgency.overdue
    if days_diff == 0:
        return Urgency.today
    if days_diff == 1:
        return Urgency.tomorrow
    if days_diff <= 2:
        return Urgency.urgent
    return Urgency.normal


def _coerce(enum_cls, value, field: str):
    try:
        return enum_cls(getattr(value, "value", value))
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}", [field])


class TransitionPolicy:
    """Decides which status and payment-status moves are legal.

    Terminal statuses are always final. Beyond that the default is permissive:
    any enum member may follow any other, because real bakery workflows skip
    steps. With ``strict=True`` status may only advance to the next step of
    STATUS_FLOW (or be cancelled) and payment status follows PAYMENT_FLOW.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def check_status(self, current: OrderStatus, new: OrderStatus) -> None:
        if current in TERMINAL_STATUSES:
            raise ConflictError(f"Order is already {current.value}; its status can no longer change")
        if not self.strict:
            return
        if new == OrderStatus.cancelled:
            return
        position = STATUS_FLOW.index(current)
        if position + 1 >= len(STATUS_FLOW) or STATUS_FLOW[position + 1] != new:
            raise ConflictError(f"Cannot move order from {current.value} to {new.value}")

    def check_payment(self, current: PaymentStatus, new: PaymentStatus) -> None:
        if not self.strict:
            return
        if new not in PAYMENT_FLOW[current]:
            raise ConflictError(f"Cannot move payment from {current.value} to {new.value}")


class OrderLifecycleManager:
    """Owns every legal change to an order's status and payment status."""

    def __init__(
        self,
        db: Session,
        clock: Optional[Callable[[], datetime]] = None,
        enforce_price: Optional[bool] = None,
        policy: Optional[TransitionPolicy] = None,
    ):
        self.db = db
        self.clock = clock or bakery_now
        self.enforce_price = Config.ENFORCE_SERVER_PRICE if enforce_price is None else enforce_price
        self.policy = policy or TransitionPolicy(strict=Config.STRICT_STATUS_TRANSITIONS)

    # --- reads ---

    def get_order(self, order_id: str) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def get_order_for_customer(self, order_id: str, customer_id: str) -> Order:
        # Someone else's order is reported exactly like a missing one
        order = (
            self.db.query(Order)
            .filter(Order.id == order_id, Order.customer_id == customer_id)
            .first()
        )
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def list_orders_for_customer(self, customer_id: str, status: Optional[str] = None) -> List[Order]:
        query = self.db.query(Order).filter(Order.customer_id == customer_id)
        if status:
            query = query.filter(Order.status == _coerce(OrderStatus, status, "status"))
        return query.order_by(Order.created_at.desc()).all()

    def list_orders(self, status: Optional[str] = None) -> List[Order]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == _coerce(OrderStatus, status, "status"))
        return query.order_by(Order.created_at.desc()).all()

    def list_events_for_order(self, order_id: str) -> List[OrderEvent]:
        """Events newest first; reverse the list for chronological history."""
        self.get_order(order_id)
        return (
            self.db.query(OrderEvent)
            .filter(OrderEvent.order_id == order_id)
            .order_by(OrderEvent.created_at.desc(), OrderEvent.id.desc())
            .all()
        )

    # --- writes ---

    def create_order(
        self,
        customer_id: str,
        cake_config: Union[CakeConfiguration, Dict[str, Any], None],
        delivery_date: Optional[date],
        delivery_time: Optional[str],
        delivery_address: Union[DeliveryAddress, Dict[str, Any], str, None],
        special_instructions: Optional[str],
        total_amount: Optional[float],
    ) -> Order:
        missing = [
            name
            for name, value in (
                ("cake_config", cake_config),
                ("delivery_date", delivery_date),
                ("delivery_address", delivery_address),
                ("total_amount", total_amount),
            )
            if value is None or value == ""
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing)

        config = self._validate_config(cake_config)
        expected = compute_price(config)
        if float(total_amount) != float(expected):
            if self.enforce_price:
                logger.warning(f"[PRICING] Rejected total_amount={total_amount} for customer {customer_id}; expected {expected}")
                raise ValidationError(
                    f"total_amount {total_amount} does not match the cake price {expected}",
                    ["total_amount"],
                )
            logger.warning(f"[PRICING] Accepting client total_amount={total_amount} (computed {expected})")

        if isinstance(delivery_address, DeliveryAddress):
            delivery_address = delivery_address.model_dump(exclude_none=True)

        now = self.clock()
        order = Order(
            customer_id=customer_id,
            order_number=self._next_order_number(now),
            cake_config=config.model_dump(mode="json", exclude_none=True),
            total_amount=float(total_amount),
            status=OrderStatus.pending,
            payment_status=PaymentStatus.pending,
            payment_method=Config.PAYMENT_METHOD,
            delivery_date=_as_date(delivery_date),
            delivery_time=delivery_time,
            delivery_address=delivery_address,
            special_instructions=special_instructions,
            created_at=now,
            updated_at=now,
        )
        self.db.add(order)
        self._add_event(order, "order_placed", "Order placed by customer", created_by=customer_id)
        self._commit("create order")

        logger.info(
            f"[LIFECYCLE] Order {order.order_number} created for customer {customer_id}: "
            f"total={order.total_amount} delivery={order.delivery_date} to {mask_pii(order.delivery_address)}"
        )
        return order

    def confirm_payment(self, order_id: str, acting_customer_id: str) -> Order:
        order = self.get_order_for_customer(order_id, acting_customer_id)

        if order.payment_status == PaymentStatus.paid:
            raise ConflictError("Payment already confirmed")
        if order.payment_status != PaymentStatus.pending:
            raise ConflictError(f"Payment cannot be confirmed while it is {order.payment_status.value}")
        if order.status in TERMINAL_STATUSES:
            raise ConflictError(f"Order is already {order.status.value}")

        order.payment_status = PaymentStatus.paid
        # An admin may already have moved the order past confirmed; never move it back
        if order.status == OrderStatus.pending:
            order.status = OrderStatus.confirmed
        order.updated_at = self.clock()
        method = (order.payment_method or "mobile money").replace("_", " ").title()
        self._add_event(
            order,
            "payment_confirmed",
            f"Customer confirmed {method} payment",
            created_by=acting_customer_id,
        )
        self._commit("confirm payment")

        logger.info(f"[LIFECYCLE] Payment confirmed for order {order.order_number}")
        return order

    def transition_status(self, order_id: str, new_status: Union[OrderStatus, str], acting_admin_id: Optional[str] = None) -> Order:
        order = self.get_order(order_id)
        self._stage_status(order, _coerce(OrderStatus, new_status, "status"), acting_admin_id)
        self._commit("update order status")
        return order

    def transition_payment_status(
        self,
        order_id: str,
        new_payment_status: Union[PaymentStatus, str],
        acting_admin_id: Optional[str] = None,
    ) -> Order:
        order = self.get_order(order_id)
        self._stage_payment(order, _coerce(PaymentStatus, new_payment_status, "payment_status"), acting_admin_id)
        self._commit("update payment status")
        return order

    def update_order(
        self,
        order_id: str,
        status: Optional[Union[OrderStatus, str]] = None,
        payment_status: Optional[Union[PaymentStatus, str]] = None,
        acting_admin_id: Optional[str] = None,
    ) -> Order:
        """Apply a status and/or payment-status change as one unit of work."""
        if status is None and payment_status is None:
            raise ValidationError("No valid fields to update", ["status", "payment_status"])

        order = self.get_order(order_id)
        try:
            if status is not None:
                self._stage_status(order, _coerce(OrderStatus, status, "status"), acting_admin_id)
            if payment_status is not None:
                self._stage_payment(order, _coerce(PaymentStatus, payment_status, "payment_status"), acting_admin_id)
        except CakeShopError:
            # the status half may already be staged; drop it with the rest
            self.db.rollback()
            raise
        self._commit("update order")
        return order

    def append_event(
        self,
        order_id: str,
        event_type: str,
        description: str,
        notes: Optional[str] = None,
        estimated_completion: Optional[datetime] = None,
        created_by: Optional[str] = None,
    ) -> OrderEvent:
        """Free-form annotation; never changes the order's status."""
        if not event_type or not description:
            missing = [n for n, v in (("event_type", event_type), ("description", description)) if not v]
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing)

        order = self.get_order(order_id)
        event = self._add_event(
            order,
            event_type,
            description,
            notes=notes,
            estimated_completion=estimated_completion,
            created_by=created_by,
        )
        self._commit("create order event")
        logger.info(f"[LIFECYCLE] Event '{event_type}' added to order {order.order_number}")
        return event

    # --- internals ---

    def _validate_config(self, cake_config) -> CakeConfiguration:
        if isinstance(cake_config, CakeConfiguration):
            config = cake_config
        else:
            try:
                config = CakeConfiguration.model_validate(cake_config)
            except PydanticValidationError as e:
                fields = ["cake_config." + ".".join(str(p) for p in err["loc"]) for err in e.errors()]
                raise ValidationError("Invalid cake_config", fields) from e

        unpriced = config.missing_for_pricing()
        if unpriced:
            fields = [f"cake_config.{name}" for name in unpriced]
            raise ValidationError(f"Missing required fields: {', '.join(fields)}", fields)
        return config

    def _stage_status(self, order: Order, new_status: OrderStatus, actor: Optional[str]) -> None:
        self.policy.check_status(order.status, new_status)
        previous = order.status
        order.status = new_status
        order.updated_at = self.clock()
        self._add_event(
            order,
            f"Status changed to {new_status.value}",
            f"Order status updated to {new_status.value}",
            created_by=actor,
        )
        logger.info(f"[LIFECYCLE] Order {order.order_number} status {previous.value} -> {new_status.value}")

    def _stage_payment(self, order: Order, new_status: PaymentStatus, actor: Optional[str]) -> None:
        self.policy.check_payment(order.payment_status, new_status)
        previous = order.payment_status
        order.payment_status = new_status
        order.updated_at = self.clock()
        self._add_event(
            order,
            f"Payment status changed to {new_status.value}",
            f"Payment status updated to {new_status.value}",
            created_by=actor,
        )
        logger.info(f"[LIFECYCLE] Order {order.order_number} payment {previous.value} -> {new_status.value}")

    def _add_event(self, order: Order, event_type: str, description: str, **extra) -> OrderEvent:
        event = OrderEvent(
            order=order,
            event_type=event_type,
            description=description,
            created_at=self.clock(),
            **extra,
        )
        self.db.add(event)
        return event

    def _next_order_number(self, now: datetime) -> str:
        """'DB' + last 8 digits of the creation time in milliseconds, bumped until unused."""
        millis = int(now.timestamp() * 1000)
        while True:
            candidate = f"DB{str(millis)[-8:]}"
            taken = self.db.query(Order.id).filter(Order.order_number == candidate).first()
            if taken is None:
                return candidate
            millis += 1

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"[LIFECYCLE] Concurrent modification while trying to {action}: {e}")
            raise ConflictError("Order was modified concurrently; reload it and try again") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"[LIFECYCLE] Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e
