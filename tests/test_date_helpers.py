from datetime import date, datetime

import pytz

from hotel_billing.utils.date_helpers import property_today, stay_nights


def test_property_day_runs_ahead_of_utc():
    # 20:00 UTC is 01:30 the next day in Colombo
    assert property_today(datetime(2025, 6, 1, 20, 0, tzinfo=pytz.utc)) == date(2025, 6, 2)


def test_naive_datetime_is_treated_as_utc():
    assert property_today(datetime(2025, 6, 1, 12, 0)) == date(2025, 6, 1)


def test_stay_nights_excludes_check_out():
    assert list(stay_nights(date(2025, 6, 1), date(2025, 6, 4))) == [
        date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3)
    ]


def test_same_day_stay_has_no_nights():
    assert list(stay_nights(date(2025, 6, 1), date(2025, 6, 1))) == []
