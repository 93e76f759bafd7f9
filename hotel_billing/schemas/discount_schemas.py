from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from typing_extensions import Annotated
from datetime import date, datetime
from decimal import Decimal

from hotel_billing.core.config import DEFAULT_CURRENCY
from hotel_billing.models.discount_models import DiscountType, DiscountStatus

NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]
CurrencyCode = Annotated[str, Field(min_length=3, max_length=3)]


class DiscountBase(BaseModel):
    name: str
    offer_id: Optional[int] = None
    description: Optional[str] = None
    discount_type: DiscountType = DiscountType.PERCENTAGE
    amount: NonNegativeDecimal
    currency: CurrencyCode = DEFAULT_CURRENCY
    min_stay_nights: int = Field(default=0, ge=0)
    valid_from: date
    valid_until: date
    blackout_dates: List[date] = Field(default_factory=list)
    max_total_usage: Optional[int] = Field(default=None, ge=0)
    max_usage_per_guest: Optional[int] = Field(default=None, ge=0)
    one_time_per_booking: bool = False
    one_time_per_guest: bool = False
    applicable_room_types: List[str] = Field(default_factory=list)
    applicable_rate_type_ids: List[str] = Field(default_factory=list)
    status: DiscountStatus = DiscountStatus.ACTIVE

class DiscountCreate(DiscountBase):
    pass

class DiscountUpdate(BaseModel):
    name: Optional[str] = None
    offer_id: Optional[int] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    amount: Optional[NonNegativeDecimal] = None
    currency: Optional[CurrencyCode] = None
    min_stay_nights: Optional[int] = Field(default=None, ge=0)
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    blackout_dates: Optional[List[date]] = None
    max_total_usage: Optional[int] = Field(default=None, ge=0)
    max_usage_per_guest: Optional[int] = Field(default=None, ge=0)
    one_time_per_booking: Optional[bool] = None
    one_time_per_guest: Optional[bool] = None
    applicable_room_types: Optional[List[str]] = None
    applicable_rate_type_ids: Optional[List[str]] = None
    status: Optional[DiscountStatus] = None

class DiscountOut(DiscountBase):
    id: int
    usage_count: int
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# -----------------------
# Validation
# -----------------------
class DiscountValidateRequest(BaseModel):
    """Proposed charge a discount is checked against."""
    discount_id: Optional[int] = None
    coupon_code: Optional[str] = None
    subtotal: Decimal
    currency: CurrencyCode = DEFAULT_CURRENCY
    check_in: date
    check_out: date
    nights: Optional[int] = Field(default=None, ge=0)
    room_types: List[str] = Field(default_factory=list)
    rate_type_ids: List[str] = Field(default_factory=list)
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    # Invoice being edited; its own ledger row does not count against exclusivity
    invoice_id: Optional[int] = None

    @model_validator(mode="after")
    def _fill_nights(self):
        if self.discount_id is None and not (self.coupon_code and self.coupon_code.strip()):
            raise ValueError("discount_id or coupon_code is required")
        if self.nights is None:
            self.nights = max((self.check_out - self.check_in).days, 0)
        return self

class DiscountValidateResponse(BaseModel):
    valid: bool
    discount_amount: Decimal = Decimal("0")
    discount_value: Decimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    error: Optional[str] = None
    discount: Optional[DiscountOut] = None
