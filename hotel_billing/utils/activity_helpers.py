# hotel_billing/utils/activity_helpers.py
from sqlalchemy.ext.asyncio import AsyncSession
from hotel_billing.models.activity_models import ActivityLog

async def log_activity(
    db: AsyncSession,
    action: str,
    entity_type: str,
    message: str,
    entity_id=None,
    entity_name: str = None,
    commit: bool = False,
):
    """
    Adds an activity log entry to the session. The caller is responsible for the commit.
    """
    activity = ActivityLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        entity_name=entity_name,
        message=message,
    )
    db.add(activity)
    if commit:
        await db.commit()
