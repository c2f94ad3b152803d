"""Pydantic models for API I/O and agent contracts.

Order models live in ``order_models``; this module holds the agent result
type, the design-wizard requests, and the catalog, profile and occasion shapes.
"""
from datetime import date as Date, datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional

from ..data.models import UserRole
from .order_models import CakeShape, CakeSize, Flavor

class AgentResult(BaseModel):
    agent: str
    intent: str
    facts: Dict[str, Any]
    needs_clarification: bool = False
    clarification_question: Optional[str] = None

class DesignSessionCreate(BaseModel):
    session_id: Optional[str] = None

class DesignActionRequest(BaseModel):
    action: str = Field(..., min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)

class UserProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    external_id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    created_at: datetime

class CustomerWithStats(UserProfileOut):
    total_orders: int = 0
    total_spent: float = 0.0
    last_order_date: Optional[datetime] = None

class CakeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    base_price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    allergens: List[str] = Field(default_factory=list)
    difficulty_level: int = Field(1, ge=1, le=5)
    preparation_time_hours: int = Field(24, ge=1)
    featured: bool = False
    available: bool = True

class CakeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    allergens: Optional[List[str]] = None
    difficulty_level: Optional[int] = Field(None, ge=1, le=5)
    preparation_time_hours: Optional[int] = Field(None, ge=1)
    featured: Optional[bool] = None
    available: Optional[bool] = None

class CakeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    base_price: float
    category: Optional[str] = None
    allergens: List[str] = Field(default_factory=list)
    available: bool
    featured: bool
    difficulty_level: int
    preparation_time_hours: int

class OccasionCategory(str, Enum):
    birthday = "birthday"
    anniversary = "anniversary"
    wedding = "wedding"
    graduation = "graduation"
    holiday = "holiday"
    celebration = "celebration"
    other = "other"

class CakePreferences(BaseModel):
    flavor: Optional[Flavor] = None
    size: Optional[CakeSize] = None
    shape: Optional[CakeShape] = None
    budget: Optional[float] = Field(None, ge=0)

class OccasionCreate(BaseModel):
    name: str = Field(..., min_length=1)
    date: Date
    description: Optional[str] = None
    reminder_days: int = Field(7, ge=0, le=365)
    category: OccasionCategory = OccasionCategory.other
    notes: Optional[str] = None
    recurring: bool = False
    cake_preferences: CakePreferences = Field(default_factory=CakePreferences)

class OccasionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    date: Optional[Date] = None
    description: Optional[str] = None
    reminder_days: Optional[int] = Field(None, ge=0, le=365)
    category: Optional[OccasionCategory] = None
    notes: Optional[str] = None
    recurring: Optional[bool] = None
    cake_preferences: Optional[CakePreferences] = None

class OccasionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    date: Date
    reminder_days: int
    category: str
    notes: Optional[str] = None
    recurring: bool
    cake_preferences: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime
    days_until: Optional[int] = None
