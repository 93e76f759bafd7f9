from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from hotel_billing.core.db import get_db
from hotel_billing.schemas.activity_schemas import ActivityLogOut, ActivityLogListResponse
from hotel_billing.services.activity_service import get_activities

router = APIRouter(prefix="/activity", tags=["Activity"])

@router.get("/", response_model=ActivityLogListResponse)
async def list_activities(
    db: AsyncSession = Depends(get_db),
    entity_type: Optional[str] = Query(None, description="discount / coupon_code / offer / invoice"),
    entity_id: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc")
):
    """
    Audit trail of catalog, coupon, offer and invoice changes, newest first.
    """
    total, activities = await get_activities(
        db=db,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order
    )

    return ActivityLogListResponse(
        message="Activities fetched successfully",
        total=total,
        data=[ActivityLogOut.model_validate(a) for a in activities]
    )
