from sqlalchemy import Column, Integer, String, Float, Boolean, Date, DateTime, ForeignKey, Enum, JSON, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from .database import Base
import enum
import uuid


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    customer = "customer"
    admin = "admin"
    baker = "baker"

class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    preparing = "preparing"
    baking = "baking"
    decorating = "decorating"
    ready = "ready"
    out_for_delivery = "out_for_delivery"
    delivered = "delivered"
    cancelled = "cancelled"

class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"
    failed = "failed"

class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    external_id = Column(String, unique=True, index=True, nullable=False)  # identity provider's user id
    full_name = Column(String, nullable=False, default="User")
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.customer)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    orders = relationship("Order", back_populates="customer")
    occasions = relationship("Occasion", back_populates="user", cascade="all, delete-orphan")

class Cake(Base):
    __tablename__ = "cakes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    description = Column(String)
    base_price = Column(Float, nullable=False)
    category = Column(String, index=True)
    allergens = Column(JSON, nullable=False, default=list)
    available = Column(Boolean, nullable=False, default=True)
    featured = Column(Boolean, nullable=False, default=False)
    difficulty_level = Column(Integer, nullable=False, default=1)
    preparation_time_hours = Column(Integer, nullable=False, default=24)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_number = Column(String(16), unique=True, index=True, nullable=False)
    customer_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=False, index=True)
    cake_config = Column(JSON, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.pending)
    payment_status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.pending)
    payment_method = Column(String, nullable=True)
    delivery_date = Column(Date, nullable=False)
    delivery_time = Column(String, nullable=True)
    delivery_address = Column(JSON, nullable=False)
    special_instructions = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)  # bumped on every UPDATE; stale writers get StaleDataError
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow)

    customer = relationship("UserProfile", back_populates="orders")
    events = relationship(
        "OrderEvent",
        back_populates="order",
        order_by=lambda: [OrderEvent.created_at.desc(), OrderEvent.id.desc()],
    )

    __mapper_args__ = {"version_id_col": version}

class OrderEvent(Base):
    __tablename__ = "order_events"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    event_type = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    estimated_completion = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(36), nullable=True)  # acting UserProfile id
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    order = relationship("Order", back_populates="events")

class Occasion(Base):
    __tablename__ = "user_occasions"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("user_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False)
    reminder_days = Column(Integer, nullable=False, default=7)
    category = Column(String, nullable=False, default="other")
    notes = Column(Text, nullable=True)
    recurring = Column(Boolean, nullable=False, default=False)
    cake_preferences = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    user = relationship("UserProfile", back_populates="occasions")
