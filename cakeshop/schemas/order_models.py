"""Order related pydantic models with stricter types.

- Use Enum for flavor, size and shape so unknown values are rejected at the edge.
- Use date for the delivery day so ISO strings are parsed.
- Creation fields are Optional on purpose: the lifecycle manager reports every
  missing field at once instead of failing on the first.
"""
from enum import Enum
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

from ..data.models import OrderStatus, PaymentStatus

class Flavor(str, Enum):
    vanilla = "Vanilla"
    strawberry = "Strawberry"
    chocolate = "Chocolate"
    choco_mint = "Choco-mint"
    mint = "Mint"
    banana = "Banana"
    fruit = "Fruit"

class CakeSize(str, Enum):
    four_inch = '4"'
    six_inch = '6"'
    eight_inch = '8"'
    ten_inch = '10"'

class CakeShape(str, Enum):
    round = "Round"
    square = "Square"
    heart = "Heart"

class Customization(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    decorations: List[str] = Field(default_factory=list)
    dietary: List[str] = Field(default_factory=list)

class CakeConfiguration(BaseModel):
    """A designed cake. Frozen: once priced it is never edited in place."""
    model_config = ConfigDict(frozen=True)

    flavor: Optional[Flavor] = None
    size: Optional[CakeSize] = None
    shape: Optional[CakeShape] = None
    layers: int = Field(1, ge=1, le=3)
    tiers: int = Field(1, ge=1, le=3)
    customization: Optional[Customization] = None
    occasion: Optional[str] = None
    servings: Optional[int] = Field(None, ge=1)

    def missing_for_pricing(self) -> List[str]:
        return [name for name in ("flavor", "size") if getattr(self, name) is None]

class DeliveryAddress(BaseModel):
    label: Optional[str] = None
    street: str = Field(..., min_length=1)
    area: Optional[str] = None
    city: str = Field(..., min_length=1)
    landmark: Optional[str] = None
    phone: Optional[str] = None

class OrderCreate(BaseModel):
    cake_config: Optional[CakeConfiguration] = None
    delivery_date: Optional[date] = None
    delivery_time: Optional[str] = None
    delivery_address: Optional[Union[DeliveryAddress, str]] = None
    special_instructions: Optional[str] = None
    total_amount: Optional[float] = Field(None, ge=0)

class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

class OrderEventCreate(BaseModel):
    event_type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    notes: Optional[str] = None
    estimated_completion: Optional[datetime] = None

class PriceBreakdown(BaseModel):
    base_price: int
    flavor_multiplier: float
    layer_multiplier: float
    tier_multiplier: float
    total: int

class PaymentInstructions(BaseModel):
    method: str
    phone_number: str
    amount: float
    currency: str
    reference: str
    instructions: List[str]

class OrderEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: str
    event_type: str
    description: Optional[str] = None
    notes: Optional[str] = None
    estimated_completion: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime

class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_number: str
    customer_id: str
    cake_config: Dict[str, Any]
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    delivery_date: date
    delivery_time: Optional[str] = None
    delivery_address: Union[Dict[str, Any], str]
    special_instructions: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class OrderWithEvents(OrderOut):
    events: List[OrderEventOut] = Field(default_factory=list)

class CustomerSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None

class AdminOrderOut(OrderOut):
    customer: Optional[CustomerSummary] = None
    urgency: Optional[str] = None
