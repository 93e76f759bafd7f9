"""Invoice arithmetic: ordering, caps and rounding."""
from decimal import Decimal

import pytest

from hotel_billing.models.discount_models import DiscountType
from hotel_billing.schemas.billing_schemas.invoice_schemas import InvoiceItemIn
from hotel_billing.services.billing_services.pricing_service import (
    calculate_invoice_total,
    calculate_discount_amount,
)


def items(*totals):
    return [InvoiceItemIn(description=f"Item {i}", quantity=1, unit_price=t) for i, t in enumerate(totals)]


class TestOrderOfOperations:
    def test_discount_is_taken_after_service_charge(self):
        totals = calculate_invoice_total(items("100"), 10, 10, DiscountType.PERCENTAGE, 10, 0, 0)

        assert totals.subtotal == Decimal("100")
        assert totals.service_charge == Decimal("10")
        assert totals.subtotal_with_service == Decimal("110")
        assert totals.discount_amount == Decimal("11")
        assert totals.after_discount == Decimal("99")
        assert totals.subtotal_with_damage == Decimal("99")
        assert totals.tax_amount == Decimal("9.90")
        assert totals.total == Decimal("108.90")

    def test_price_adjustment_is_added_last(self):
        totals = calculate_invoice_total(items("100"), 10, 10, DiscountType.PERCENTAGE, 10, 0, Decimal("1.10"))
        assert totals.total == Decimal("110.00")

    def test_damage_charge_is_not_discounted_but_is_taxed(self):
        totals = calculate_invoice_total(
            items("150", "50"), 10, 20, DiscountType.FIXED, 10, 50, -10
        )
        assert totals.subtotal == Decimal("200")
        assert totals.service_charge == Decimal("20")
        assert totals.discount_amount == Decimal("20")
        assert totals.after_discount == Decimal("200")
        assert totals.subtotal_with_damage == Decimal("250")
        assert totals.tax_amount == Decimal("25")
        assert totals.total == Decimal("265")


class TestFixedDiscount:
    def test_capped_at_post_service_subtotal(self):
        totals = calculate_invoice_total(items("100"), 10, 500, DiscountType.FIXED, 10, 0, 0)
        assert totals.discount_amount == Decimal("110")
        assert totals.after_discount == Decimal("0")
        assert totals.total == Decimal("0")

    def test_smaller_than_subtotal_applies_in_full(self):
        assert calculate_discount_amount(25, DiscountType.FIXED, 110) == Decimal("25")


class TestNeverFails:
    def test_empty_items(self):
        totals = calculate_invoice_total([], 10, 10, DiscountType.PERCENTAGE, 10, 0, 0)
        assert totals.total == Decimal("0")

    def test_negative_adjustment_can_make_total_negative(self):
        totals = calculate_invoice_total(items("100"), 0, 0, DiscountType.PERCENTAGE, 0, 0, -150)
        assert totals.total == Decimal("-50")

    def test_same_inputs_same_outputs(self):
        args = (items("120.50", "79.99"), 10, 12.5, DiscountType.PERCENTAGE, 10, 15, -3)
        assert calculate_invoice_total(*args) == calculate_invoice_total(*args)

    def test_unknown_discount_type(self):
        with pytest.raises(ValueError):
            calculate_discount_amount(10, "bogus", 100)


def test_rounds_half_up_only_at_output():
    totals = calculate_invoice_total(items("33.33"), 10, 0, DiscountType.PERCENTAGE, 10, 0, 0)
    # 33.33 + 3.333 = 36.663; tax 3.6663; total 40.3293
    assert totals.service_charge == Decimal("3.33")
    assert totals.tax_amount == Decimal("3.67")
    assert totals.total == Decimal("40.33")


def test_item_total_is_derived_from_quantity_and_price():
    item = InvoiceItemIn(description="Deluxe - 3 nights", quantity=3, quantity_type="days", unit_price="80", total="1")
    assert item.total == Decimal("240")
