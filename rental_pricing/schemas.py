from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from rental_pricing.config import MAX_QUANTITY, MAX_RENTAL_DAYS


class RentalPeriodPayload(BaseModel):
    days: int = Field(gt=0)
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    label: Optional[str] = Field(default=None, max_length=60)


class RentalPeriodResponse(BaseModel):
    id: Optional[int]
    days: int
    price: float
    label: Optional[str]
    display_label: str
    price_per_day: float


class EquipmentCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    category: str = Field(min_length=1, max_length=80)
    description: Optional[str] = None
    price_per_day: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    quantity: int = Field(default=1, ge=1)
    rental_periods: list[RentalPeriodPayload] = Field(default_factory=list)


class RentalPeriodsUpdateRequest(BaseModel):
    rental_periods: list[RentalPeriodPayload]


class EquipmentResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str]
    price_per_day: float
    quantity: int
    status: str
    created_at: datetime
    rental_periods: list[RentalPeriodResponse]


class PriceQuoteResponse(BaseModel):
    equipment_id: int
    days: int
    quantity: int
    unit_price: float
    total_price: float
    total_price_text: str
    price_per_day: float
    period_label: str
    applied_period: Optional[RentalPeriodResponse]


class QuoteItemRequest(BaseModel):
    equipment_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_QUANTITY)


class BatchQuoteRequest(BaseModel):
    days: int = Field(gt=0, le=MAX_RENTAL_DAYS)
    items: list[QuoteItemRequest] = Field(min_length=1)


class QuoteItemResponse(BaseModel):
    equipment_id: int
    quantity: int
    unit_price: float
    total_price: float
    period_label: str


class BatchQuoteResponse(BaseModel):
    days: int
    items: list[QuoteItemResponse]
    grand_total: float
    grand_total_text: str
