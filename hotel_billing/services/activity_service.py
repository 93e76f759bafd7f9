# hotel_billing/services/activity_service.py
from sqlalchemy import select, desc, asc, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Tuple
from hotel_billing.models.activity_models import ActivityLog

ALLOWED_SORT_FIELDS = {"id", "action", "entity_type", "created_at"}

async def get_activities(
    db: AsyncSession,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc"
) -> Tuple[int, List[ActivityLog]]:
    if sort_by not in ALLOWED_SORT_FIELDS:
        sort_by = "created_at"

    sort_column = getattr(ActivityLog, sort_by)
    sort_order = desc(sort_column) if order.lower() == "desc" else asc(sort_column)
    # id breaks ties between rows written in the same second
    tie_breaker = desc(ActivityLog.id) if order.lower() == "desc" else asc(ActivityLog.id)

    filters = []
    if entity_type:
        filters.append(ActivityLog.entity_type == entity_type)
    if entity_id:
        filters.append(ActivityLog.entity_id == entity_id)
    if action:
        filters.append(ActivityLog.action == action)

    total_result = await db.execute(select(func.count(ActivityLog.id)).where(*filters))
    total = total_result.scalar() or 0

    stmt = (
        select(ActivityLog)
        .where(*filters)
        .order_by(sort_order, tie_breaker)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(stmt)
    return total, result.scalars().all()
