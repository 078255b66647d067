from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

from .models import RoleEnum, GenderEnum, ListingStatus, MatchStatus, OrderStatus


class SignupIn(BaseModel):
    # Required fields are checked by accounts.signup so the error names them all at once.
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    city: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    username: str
    email: str
    role: RoleEnum
    full_name: Optional[str] = None


class SignupOut(BaseModel):
    message: str
    user: UserBrief


class LoginOut(BaseModel):
    message: str
    token: str
    user: UserBrief


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    full_name: str
    email: str
    gender: Optional[GenderEnum] = None
    date_of_birth: Optional[date] = None
    city: Optional[str] = None
    role: RoleEnum


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    waste_type: str = Field(..., min_length=1)
    weight_kg: float = Field(..., gt=0, description="Weight in kilograms")
    price: float = Field(..., gt=0, description="Total price for the full weight")


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    name: str
    waste_type: str
    weight_kg: float
    price: float
    created_at: Optional[datetime] = None


class OrderCreate(BaseModel):
    item_id: int
    weight_kg: float = Field(..., gt=0)


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    buyer_id: int
    seller_id: int
    weight_kg: float
    amount_paid: float
    emissions_prevented_kg: float
    status: OrderStatus
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class OrderRow(OrderOut):
    """Order joined with its item's name and waste type."""
    name: Optional[str] = None
    waste_type: Optional[str] = None


class ListingCreate(BaseModel):
    waste_type: str = Field(..., min_length=1)
    quantity_kg: float = Field(..., gt=0)
    location: str = Field(..., min_length=1)
    expected_price: float = Field(..., gt=0)


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    seller_id: int
    waste_type: str
    quantity_kg: float
    location: str
    expected_price: float
    status: ListingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MatchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    listing_id: int
    buyer_id: int
    status: MatchStatus
    updated_at: Optional[datetime] = None


class TransitionOut(BaseModel):
    message: str
    listing: ListingOut
    match: MatchOut


class Totals(BaseModel):
    total_amount: float = 0
    total_weight: float = 0
    total_emissions: float = 0
    total_transactions: int = 0


class Impact(BaseModel):
    trees_equivalent: float = 0


class OrderDashboardOut(BaseModel):
    period: str
    totals: Totals
    impact: Impact
    history: list[OrderRow]


class ListingDashboardOut(BaseModel):
    period: str
    totals: Totals
    impact: Impact
