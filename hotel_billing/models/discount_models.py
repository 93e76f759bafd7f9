import enum
from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from hotel_billing.core.db import Base


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class DiscountStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Offer(Base):
    """Display group for discounts on the promotions page."""
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    discount_type = Column(Enum(DiscountType, name="discount_type"), nullable=False, default=DiscountType.PERCENTAGE)
    amount = Column(Numeric(12, 2), nullable=False)  # percentage points or currency units
    currency = Column(String(3), nullable=False, default="USD")  # only meaningful for fixed discounts

    # Eligibility constraints
    min_stay_nights = Column(Integer, nullable=False, default=0)
    valid_from = Column(Date, nullable=False)
    valid_until = Column(Date, nullable=False)
    blackout_dates = Column(JSON, nullable=False, default=list)  # ISO date strings
    applicable_room_types = Column(JSON, nullable=False, default=list)
    applicable_rate_type_ids = Column(JSON, nullable=False, default=list)

    # Usage caps
    max_total_usage = Column(Integer, nullable=True)
    max_usage_per_guest = Column(Integer, nullable=True)
    one_time_per_booking = Column(Boolean, nullable=False, default=False)
    one_time_per_guest = Column(Boolean, nullable=False, default=False)
    usage_count = Column(Integer, nullable=False, default=0)

    status = Column(Enum(DiscountStatus, name="discount_status"), nullable=False, default=DiscountStatus.ACTIVE)

    # Soft delete marker, kept for historical reports
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    coupon_codes = relationship("CouponCode", back_populates="discount", cascade="all, delete-orphan", lazy="selectin")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class CouponCode(Base):
    __tablename__ = "coupon_codes"

    id = Column(Integer, primary_key=True, index=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    discount = relationship("Discount", back_populates="coupon_codes", lazy="selectin")
