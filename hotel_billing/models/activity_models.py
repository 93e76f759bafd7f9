# hotel_billing/models/activity_models.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from hotel_billing.core.db import Base

class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False, index=True)       # e.g. discount_created
    entity_type = Column(String, nullable=False)              # discount / coupon_code / offer / invoice
    entity_id = Column(String, nullable=True)
    entity_name = Column(String, nullable=True)

    message = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
