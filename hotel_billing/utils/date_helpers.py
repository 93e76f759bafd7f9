# hotel_billing/utils/date_helpers.py
from datetime import date, datetime, timedelta
from typing import Iterator
import pytz

from hotel_billing.core.config import PROPERTY_TIMEZONE


def property_today(now: datetime | None = None) -> date:
    """Calendar date at the property, regardless of the server's or caller's zone."""
    tz = pytz.timezone(PROPERTY_TIMEZONE)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz).date()


def property_now() -> datetime:
    return datetime.now(pytz.timezone(PROPERTY_TIMEZONE))


def stay_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Each night of a stay: check-in inclusive, check-out exclusive."""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)
