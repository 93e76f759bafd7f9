# hotel_billing/models/billing_models/invoice_models.py
from decimal import Decimal
import enum
from sqlalchemy import (
    Column, Integer, String, ForeignKey, Numeric, Date, DateTime, Enum, JSON
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from hotel_billing.core.db import Base
from hotel_billing.models.discount_models import DiscountType


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    CANCELLED = "cancelled"


class QuantityType(str, enum.Enum):
    QUANTITY = "quantity"
    DAYS = "days"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False, index=True)

    # Guests, bookings and rooms live in other services; referenced by id only
    guest_id = Column(String, nullable=True, index=True)
    booking_id = Column(String, nullable=True, index=True)
    currency = Column(String(3), nullable=False, default="USD")
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    room_types = Column(JSON, nullable=False, default=list)
    rate_type_ids = Column(JSON, nullable=False, default=list)

    # Rates as entered
    service_charge_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    tax_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    discount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    discount_type = Column(Enum(DiscountType, name="invoice_discount_type"), nullable=False, default=DiscountType.PERCENTAGE)
    damage_charge = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    price_adjustment = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    price_adjustment_reason = Column(String, nullable=True)

    # Calculated figures
    subtotal = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    service_charge = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    discount_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    tax_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    status = Column(Enum(InvoiceStatus, name="invoice_status"), default=InvoiceStatus.DRAFT, nullable=False)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="InvoiceItem.id",
    )
    # Written only through usage_ledger_service.replace_invoice_discount
    applied_discount = relationship(
        "InvoiceDiscount",
        uselist=False,
        lazy="selectin",
        viewonly=True,
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False, default=Decimal("1"))
    quantity_type = Column(Enum(QuantityType, name="quantity_type"), nullable=False, default=QuantityType.QUANTITY)
    unit_price = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=True)  # set when sourced from a saved catalog item

    invoice = relationship("Invoice", back_populates="items")

    # total is derived; keep it in step with quantity and unit_price
    @validates("quantity", "unit_price")
    def _recalculate_total(self, key, value):
        quantity = value if key == "quantity" else self.quantity
        unit_price = value if key == "unit_price" else self.unit_price
        if quantity is not None and unit_price is not None:
            self.total = Decimal(str(quantity)) * Decimal(str(unit_price))
        return value


class InvoiceDiscount(Base):
    """Usage ledger row: the discount an invoice consumed, snapshotted at application time."""
    __tablename__ = "invoice_discounts"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    discount_id = Column(Integer, ForeignKey("discounts.id"), nullable=False, index=True)
    coupon_code_id = Column(Integer, ForeignKey("coupon_codes.id", ondelete="SET NULL"), nullable=True)
    guest_id = Column(String, nullable=True, index=True)
    booking_id = Column(String, nullable=True, index=True)

    discount_amount = Column(Numeric(14, 2), nullable=False)
    discount_type = Column(Enum(DiscountType, name="ledger_discount_type"), nullable=False)
    discount_value_used = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
