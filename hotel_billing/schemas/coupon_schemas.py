from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from hotel_billing.schemas.discount_schemas import DiscountOut


class CouponCodeCreate(BaseModel):
    discount_id: int
    code: str = Field(..., max_length=50)

class CouponCodeOut(BaseModel):
    id: int
    discount_id: int
    code: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    discount: Optional[DiscountOut] = None

    class Config:
        from_attributes = True

class CouponLookupRequest(BaseModel):
    code: str = ""

class CouponLookupResponse(BaseModel):
    coupon: CouponCodeOut
