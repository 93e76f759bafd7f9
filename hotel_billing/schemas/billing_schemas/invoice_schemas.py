from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from typing import Optional, List
from datetime import date, datetime
from typing_extensions import Annotated

from hotel_billing.core.config import DEFAULT_CURRENCY, DEFAULT_SERVICE_CHARGE_RATE, DEFAULT_TAX_RATE
from hotel_billing.models.discount_models import DiscountType
from hotel_billing.models.billing_models.invoice_models import InvoiceStatus, QuantityType

# Define reusable constrained Decimal types
NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]
Rate = Annotated[Decimal, Field(ge=0, le=100)]


class InvoiceItemIn(BaseModel):
    description: str
    quantity: Annotated[Decimal, Field(ge=0)] = Decimal("1")
    quantity_type: QuantityType = QuantityType.QUANTITY
    unit_price: Decimal
    currency: Optional[str] = None
    # Ignored on input; always quantity x unit_price
    total: Decimal = Decimal("0")

    @model_validator(mode="after")
    def _derive_total(self):
        self.total = self.quantity * self.unit_price
        return self

class InvoiceItemOut(BaseModel):
    id: int
    description: str
    quantity: Decimal
    quantity_type: QuantityType
    unit_price: Decimal
    total: Decimal
    currency: Optional[str] = None

    class Config:
        from_attributes = True


class InvoiceTotals(BaseModel):
    subtotal: Decimal
    service_charge: Decimal
    subtotal_with_service: Decimal
    discount_amount: Decimal
    after_discount: Decimal
    damage_charge: Decimal
    subtotal_with_damage: Decimal
    tax_amount: Decimal
    price_adjustment: Decimal
    total: Decimal


class InvoiceCalculateRequest(BaseModel):
    items: List[InvoiceItemIn] = Field(default_factory=list)
    service_charge_rate: Rate = DEFAULT_SERVICE_CHARGE_RATE
    tax_rate: Rate = DEFAULT_TAX_RATE
    discount: NonNegativeDecimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    damage_charge: NonNegativeDecimal = Decimal("0")
    price_adjustment: Decimal = Decimal("0")

class InvoiceCreate(InvoiceCalculateRequest):
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    currency: str = Field(default=DEFAULT_CURRENCY, min_length=3, max_length=3)
    check_in: date
    check_out: date
    room_types: List[str] = Field(default_factory=list)
    rate_type_ids: List[str] = Field(default_factory=list)
    # Catalog discount; when set it overrides discount/discount_type
    discount_id: Optional[int] = None
    coupon_code: Optional[str] = None
    price_adjustment_reason: Optional[str] = None
    notes: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT

    @model_validator(mode="after")
    def _check_dates(self):
        if self.check_out < self.check_in:
            raise ValueError("check_out must not be before check_in")
        return self

class InvoiceUpdate(InvoiceCreate):
    pass


class AppliedDiscountOut(BaseModel):
    discount_id: int
    coupon_code_id: Optional[int] = None
    guest_id: Optional[str] = None
    booking_id: Optional[str] = None
    discount_amount: Decimal
    discount_type: DiscountType
    discount_value_used: Decimal

    class Config:
        from_attributes = True

class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    guest_id: Optional[str]
    booking_id: Optional[str]
    currency: str
    check_in: date
    check_out: date
    room_types: List[str]
    rate_type_ids: List[str]
    items: List[InvoiceItemOut]
    subtotal: Decimal
    service_charge_rate: Decimal
    service_charge: Decimal
    discount: Decimal
    discount_type: DiscountType
    discount_amount: Decimal
    damage_charge: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    price_adjustment: Decimal
    price_adjustment_reason: Optional[str]
    total: Decimal
    status: InvoiceStatus
    notes: Optional[str]
    applied_discount: Optional[AppliedDiscountOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
