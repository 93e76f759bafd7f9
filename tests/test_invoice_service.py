"""Invoice finalization: pricing, validation and the usage ledger together."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from hotel_billing.models.billing_models.invoice_models import Invoice, InvoiceDiscount
from hotel_billing.models.discount_models import DiscountType
from hotel_billing.schemas.billing_schemas.invoice_schemas import InvoiceCreate, InvoiceUpdate
from hotel_billing.schemas.discount_schemas import DiscountValidateRequest
from hotel_billing.services.billing_services import discount_validation_service
from hotel_billing.services.billing_services.discount_service import get_discount_by_id
from hotel_billing.services.billing_services.discount_validation_service import validate_discount
from hotel_billing.services.billing_services.invoice_service import (
    create_invoice, update_invoice, get_invoice_by_id,
)

TODAY = date(2025, 6, 1)


def invoice_payload(cls=InvoiceCreate, **overrides):
    fields = dict(
        guest_id="guest-1",
        booking_id="BK-1",
        check_in=date(2025, 6, 1),
        check_out=date(2025, 6, 4),
        room_types=["Deluxe"],
        rate_type_ids=["BB"],
        service_charge_rate="10",
        tax_rate="10",
        items=[{"description": "Deluxe room", "quantity": "3", "quantity_type": "days", "unit_price": "100"}],
    )
    fields.update(overrides)
    return cls(**fields)


async def count(db, model):
    return (await db.execute(select(func.count()).select_from(model))).scalar()


async def usage(db, discount_id):
    return (await get_discount_by_id(db, discount_id)).usage_count


class TestCreateInvoice:
    async def test_without_discount(self, db):
        invoice = await create_invoice(db, invoice_payload(), today=TODAY)

        assert invoice.invoice_number.startswith("INV-")
        assert invoice.subtotal == Decimal("300.00")
        assert invoice.service_charge == Decimal("30.00")
        assert invoice.tax_amount == Decimal("33.00")
        assert invoice.total == Decimal("363.00")
        assert invoice.items[0].total == Decimal("300.00")
        assert invoice.applied_discount is None

    async def test_with_coupon_records_ledger(self, db, add_discount, add_coupon):
        discount = await add_discount(amount=Decimal("15"))
        coupon = await add_coupon(discount, "SUMMER15")

        invoice = await create_invoice(db, invoice_payload(coupon_code="summer15"), today=TODAY)

        # 330 with service, 15% off, then 10% tax
        assert invoice.discount == Decimal("15")
        assert invoice.discount_type == DiscountType.PERCENTAGE
        assert invoice.discount_amount == Decimal("49.50")
        assert invoice.tax_amount == Decimal("28.05")
        assert invoice.total == Decimal("308.55")

        entry = invoice.applied_discount
        assert entry.discount_id == discount.id
        assert entry.coupon_code_id == coupon.id
        assert entry.guest_id == "guest-1"
        assert entry.booking_id == "BK-1"
        assert entry.discount_amount == Decimal("49.50")
        assert await usage(db, discount.id) == 1

    async def test_fixed_discount_uses_validated_amount(self, db, add_discount):
        discount = await add_discount(discount_type=DiscountType.FIXED, amount=Decimal("50"))
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)

        assert invoice.discount_amount == Decimal("50.00")
        assert invoice.total == Decimal("308.00")
        assert invoice.applied_discount.discount_value_used == Decimal("50.00")

    async def test_manual_discount_has_no_ledger_row(self, db):
        invoice = await create_invoice(
            db, invoice_payload(discount="10", discount_type=DiscountType.PERCENTAGE), today=TODAY
        )
        assert invoice.discount_amount == Decimal("33.00")
        assert invoice.applied_discount is None
        assert await count(db, InvoiceDiscount) == 0

    async def test_rejected_discount_persists_nothing(self, db, add_discount):
        discount = await add_discount(min_stay_nights=5)
        discount_id = discount.id

        with pytest.raises(ValueError, match="Minimum stay of 5 nights required"):
            await create_invoice(db, invoice_payload(discount_id=discount_id), today=TODAY)

        assert await count(db, Invoice) == 0
        assert await count(db, InvoiceDiscount) == 0
        assert await usage(db, discount_id) == 0

    async def test_single_use_discount_is_spent_by_first_invoice(self, db, add_discount):
        discount = await add_discount(amount=Decimal("15"), min_stay_nights=2, max_total_usage=1)
        discount_id = discount.id

        request = DiscountValidateRequest(
            discount_id=discount_id,
            subtotal="200",
            check_in=date(2025, 6, 1),
            check_out=date(2025, 6, 4),
        )
        first = await validate_discount(db, request, today=TODAY)
        assert first.valid and first.discount_amount == Decimal("30")

        await create_invoice(db, invoice_payload(discount_id=discount_id), today=TODAY)
        assert await usage(db, discount_id) == 1

        second = await validate_discount(db, request, today=TODAY)
        assert second.reason == "Discount usage limit reached"

        with pytest.raises(ValueError, match="Discount usage limit reached"):
            await create_invoice(
                db, invoice_payload(discount_id=discount_id, guest_id="guest-2", booking_id="BK-2"), today=TODAY
            )
        assert await count(db, Invoice) == 1

    async def test_stale_read_still_refused_at_write(self, db, add_discount, monkeypatch):
        discount = await add_discount(max_total_usage=1, usage_count=1)
        discount_id = discount.id
        # Simulate a concurrent finalizer that read usage_count before it was bumped
        monkeypatch.setattr(discount_validation_service, "check_discount_rules", lambda *args: None)

        with pytest.raises(ValueError, match="Discount usage limit reached"):
            await create_invoice(db, invoice_payload(discount_id=discount_id), today=TODAY)

        assert await count(db, Invoice) == 0
        assert await count(db, InvoiceDiscount) == 0
        assert await usage(db, discount_id) == 1


class TestUpdateInvoice:
    async def test_refinalizing_same_discount_does_not_recount(self, db, add_discount):
        discount = await add_discount()
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)

        updated = await update_invoice(
            db, invoice.id, invoice_payload(InvoiceUpdate, discount_id=discount.id, notes="late checkout"), today=TODAY
        )

        assert updated.notes == "late checkout"
        assert updated.applied_discount.discount_id == discount.id
        assert await usage(db, discount.id) == 1

    async def test_editing_invoice_holding_last_unit(self, db, add_discount):
        discount = await add_discount(max_total_usage=1)
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)
        assert await usage(db, discount.id) == 1

        updated = await update_invoice(
            db, invoice.id, invoice_payload(InvoiceUpdate, discount_id=discount.id, notes="x"), today=TODAY
        )

        assert updated.notes == "x"
        assert updated.applied_discount.discount_id == discount.id
        assert await usage(db, discount.id) == 1

    async def test_editing_after_discount_window_closed(self, db, add_discount):
        discount = await add_discount(valid_until=date(2025, 6, 30))
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)

        updated = await update_invoice(
            db, invoice.id, invoice_payload(InvoiceUpdate, discount_id=discount.id, notes="x"), today=date(2025, 7, 2)
        )
        assert updated.applied_discount.discount_id == discount.id

        with pytest.raises(ValueError, match="Discount has expired"):
            await create_invoice(
                db, invoice_payload(discount_id=discount.id, booking_id="BK-2"), today=date(2025, 7, 2)
            )

    async def test_switching_to_exhausted_discount_is_refused(self, db, add_discount):
        held = await add_discount(name="Held")
        spent = await add_discount(name="Spent", max_total_usage=1, usage_count=1)
        spent_id = spent.id
        invoice = await create_invoice(db, invoice_payload(discount_id=held.id), today=TODAY)
        invoice_id = invoice.id

        with pytest.raises(ValueError, match="Discount usage limit reached"):
            await update_invoice(db, invoice_id, invoice_payload(InvoiceUpdate, discount_id=spent_id), today=TODAY)

    async def test_switching_discount(self, db, add_discount):
        first = await add_discount(name="First", amount=Decimal("10"))
        second = await add_discount(name="Second", amount=Decimal("20"))
        invoice = await create_invoice(db, invoice_payload(discount_id=first.id), today=TODAY)

        updated = await update_invoice(db, invoice.id, invoice_payload(InvoiceUpdate, discount_id=second.id), today=TODAY)

        assert updated.discount_amount == Decimal("66.00")
        assert updated.applied_discount.discount_id == second.id
        assert await usage(db, first.id) == 1
        assert await usage(db, second.id) == 1
        assert await count(db, InvoiceDiscount) == 1

    async def test_removing_discount_clears_ledger(self, db, add_discount):
        discount = await add_discount()
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)

        updated = await update_invoice(db, invoice.id, invoice_payload(InvoiceUpdate), today=TODAY)

        assert updated.discount_amount == Decimal("0.00")
        assert updated.applied_discount is None
        assert await usage(db, discount.id) == 1

    async def test_one_time_guest_discount_allows_own_invoice(self, db, add_discount):
        discount = await add_discount(one_time_per_guest=True, one_time_per_booking=True)
        invoice = await create_invoice(db, invoice_payload(discount_id=discount.id), today=TODAY)

        updated = await update_invoice(db, invoice.id, invoice_payload(InvoiceUpdate, discount_id=discount.id), today=TODAY)
        assert updated.applied_discount is not None

        with pytest.raises(ValueError, match="Guest has already used this discount"):
            await create_invoice(db, invoice_payload(discount_id=discount.id, booking_id="BK-9"), today=TODAY)

    async def test_replaces_items(self, db):
        invoice = await create_invoice(db, invoice_payload(), today=TODAY)
        updated = await update_invoice(
            db,
            invoice.id,
            invoice_payload(InvoiceUpdate, items=[{"description": "Minibar", "unit_price": "12.50", "quantity": "2"}]),
            today=TODAY,
        )
        assert [item.description for item in updated.items] == ["Minibar"]
        assert updated.subtotal == Decimal("25.00")

    async def test_missing_invoice(self, db):
        with pytest.raises(LookupError):
            await update_invoice(db, 404, invoice_payload(InvoiceUpdate), today=TODAY)

    async def test_get_missing_invoice(self, db):
        assert await get_invoice_by_id(db, 404) is None
