from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date

from hotel_billing.core.db import get_db
from hotel_billing.schemas.report_schemas import DiscountUsageReport
from hotel_billing.services.billing_services.report_service import get_discount_usage_report

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/discount-usage", response_model=DiscountUsageReport)
async def route_discount_usage(
    start_date: date | None = Query(None, description="Stays checking out on/after this date"),
    end_date: date | None = Query(None, description="Stays checking in on/before this date"),
    db: AsyncSession = Depends(get_db),
):
    rows = await get_discount_usage_report(db, start_date=start_date, end_date=end_date)
    return {"rows": rows}
