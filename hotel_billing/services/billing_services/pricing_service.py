# hotel_billing/services/billing_services/pricing_service.py
"""
Invoice arithmetic.

The order of operations is fixed and changes the result if reordered:

    subtotal -> service charge -> discount -> damage charge -> tax -> adjustment

A percentage discount is taken against the subtotal *including* service
charge, damage charges are never discounted, and tax is charged on the net
amount after discount and damage. All arithmetic is Decimal; figures are
rounded to cents only when the totals are returned.
"""
from decimal import Decimal
from typing import Iterable

from hotel_billing.models.discount_models import DiscountType
from hotel_billing.schemas.billing_schemas.invoice_schemas import InvoiceTotals
from hotel_billing.utils.decimal_utils import to_decimal, round_money

HUNDRED = Decimal("100")


def calculate_subtotal(items: Iterable) -> Decimal:
    return sum((to_decimal(item.total) for item in items), Decimal("0"))


def calculate_discount_amount(discount, discount_type: DiscountType, base) -> Decimal:
    discount = to_decimal(discount)
    base = to_decimal(base)
    if discount_type == DiscountType.PERCENTAGE:
        return base * discount / HUNDRED
    elif discount_type == DiscountType.FIXED:
        # A fixed discount never takes the running figure below zero
        return min(discount, base)
    raise ValueError(f"Unsupported discount type: {discount_type}")


def calculate_invoice_total(
    items: Iterable,
    tax_rate,
    discount,
    discount_type: DiscountType,
    service_charge_rate,
    damage_charge,
    price_adjustment,
) -> InvoiceTotals:
    """Itemised invoice totals. Negative or out-of-range figures are priced as given."""
    tax_rate = to_decimal(tax_rate)
    service_charge_rate = to_decimal(service_charge_rate)
    damage_charge = to_decimal(damage_charge)
    price_adjustment = to_decimal(price_adjustment)

    subtotal = calculate_subtotal(items)

    service_charge = subtotal * service_charge_rate / HUNDRED
    subtotal_with_service = subtotal + service_charge

    discount_amount = calculate_discount_amount(discount, discount_type, subtotal_with_service)
    after_discount = subtotal_with_service - discount_amount

    subtotal_with_damage = after_discount + damage_charge

    tax_amount = subtotal_with_damage * tax_rate / HUNDRED

    total = subtotal_with_damage + tax_amount + price_adjustment

    return InvoiceTotals(
        subtotal=round_money(subtotal),
        service_charge=round_money(service_charge),
        subtotal_with_service=round_money(subtotal_with_service),
        discount_amount=round_money(discount_amount),
        after_discount=round_money(after_discount),
        damage_charge=round_money(damage_charge),
        subtotal_with_damage=round_money(subtotal_with_damage),
        tax_amount=round_money(tax_amount),
        price_adjustment=round_money(price_adjustment),
        total=round_money(total),
    )
