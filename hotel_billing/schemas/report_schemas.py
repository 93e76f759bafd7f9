from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal


class DiscountUsageRow(BaseModel):
    discount_id: int
    discount_name: str
    coupon_code: Optional[str] = None
    usage_count: int
    total_discount_amount: Decimal
    currency: str

class DiscountUsageReport(BaseModel):
    rows: List[DiscountUsageRow]
