# hotel_billing/models/__init__.py
from hotel_billing.models.activity_models import ActivityLog
from hotel_billing.models.discount_models import Offer, Discount, CouponCode, DiscountType, DiscountStatus
from hotel_billing.models.billing_models.invoice_models import (
    Invoice, InvoiceItem, InvoiceDiscount, InvoiceStatus, QuantityType
)
