from datetime import date, datetime

import pytest

from studio_ops.data_models import (
    BookingRecord,
    BookingStatus,
    ClassSession,
    Subscription,
    SubscriptionStatus,
    UserDirectory,
    UserRef,
    as_date,
    as_datetime,
    percent_of,
)
from studio_ops.durations import InvalidArgument


@pytest.mark.parametrize(
    "value, expected",
    [
        (date(2025, 7, 15), date(2025, 7, 15)),
        (datetime(2025, 7, 15, 23, 59), date(2025, 7, 15)),
        ("2025-07-15", date(2025, 7, 15)),
        ("2025-07-15T08:30:00Z", date(2025, 7, 15)),
        ("", None),
        (None, None),
        ("not a date", None),
        ("2025-02", None),
        ("July 15", None),
        (12345, None),
    ],
)
def test_as_date(value, expected):
    assert as_date(value) == expected


@pytest.mark.parametrize(
    "part, whole, expected",
    [(5, 8, 63), (10, 8, 125), (1, 3, 33), (2, 3, 67), (1, 8, 13), (0, 8, 0), (3, 0, 0)],
)
def test_percent_of_rounds_half_up(part, whole, expected):
    assert percent_of(part, whole) == expected


@pytest.mark.parametrize(
    "raw, status",
    [
        ("active", SubscriptionStatus.ACTIVE),
        ("ACTIVE", SubscriptionStatus.ACTIVE),
        ("canceled", SubscriptionStatus.CANCELLED),
        ("paused", SubscriptionStatus.UNKNOWN),
        (None, SubscriptionStatus.UNKNOWN),
    ],
)
def test_subscription_status_parse(raw, status):
    assert SubscriptionStatus.parse(raw) is status


@pytest.mark.parametrize(
    "raw, status",
    [
        ("confirmed", BookingStatus.CONFIRMED),
        ("Waitlist", BookingStatus.WAITLIST),
        ("no-show", BookingStatus.NO_SHOW),
        ("weird", BookingStatus.UNKNOWN),
    ],
)
def test_booking_status_parse(raw, status):
    assert BookingStatus.parse(raw) is status


def test_user_display_name():
    assert UserRef(id=1, name="Ana").display_name == "Ana"
    assert UserRef(id=2, first_name="Besa", last_name="K").display_name == "Besa K"
    assert UserRef(id=3).display_name == "Unknown Client"


def test_user_directory_client():
    directory = UserDirectory.build([UserRef(id=1, name="Ana", email="a@x.com")])
    assert directory.client(1, "confirmed").email == "a@x.com"
    missing = directory.client(9, "waitlist")
    assert (missing.name, missing.email, missing.status) == ("Unknown Client", "No email", "waitlist")


def test_class_session_from_record():
    session = ClassSession.from_record(
        {"id": 4, "date": "2025-07-15", "time": "09:00", "max_capacity": "10", "capacity": None}
    )
    assert session.date == date(2025, 7, 15)
    assert session.max_capacity == 10
    assert session.capacity is None


def test_booking_from_record():
    booking = BookingRecord.from_record(
        {"id": 1, "class_id": 4, "user_id": "u1", "status": "waitlist",
         "created_at": "2025-07-14T10:00:00"}
    )
    assert booking.status is BookingStatus.WAITLIST
    assert booking.created_at == datetime(2025, 7, 14, 10, 0)


def test_subscription_from_joined_record():
    sub = Subscription.from_record(
        {
            "id": 7,
            "user_id": "u1",
            "status": "active",
            "start_date": "2025-07-01",
            "end_date": "2025-07-31",
            "remaining_classes": 4,
            "users": {"name": "Ana", "email": "ana@example.com"},
            "subscription_plans": {
                "name": "8 Classes",
                "monthly_classes": 8,
                "monthly_price": "60.00",
                "equipment_access": "reformer",
            },
        }
    )
    assert sub.plan_name == "8 Classes"
    assert sub.client_name == "Ana"
    assert sub.monthly_class_quota == 8
    assert sub.monthly_price == 60.0
    assert sub.equipment_access == "reformer"
    assert sub.end_date == date(2025, 7, 31)


def test_subscription_end_date_from_plan_duration():
    sub = Subscription.from_record(
        {
            "id": 8,
            "status": "active",
            "start_date": "2025-01-31",
            "subscription_plans": {"duration": 1, "duration_unit": "months"},
        }
    )
    assert sub.end_date == date(2025, 2, 28)
    assert sub.plan_name == "Unknown Plan"


def test_subscription_bad_duration_raises():
    with pytest.raises(InvalidArgument):
        Subscription.from_record(
            {"id": 9, "start_date": "2025-01-31", "duration": 2, "duration_unit": "fortnights"}
        )


def test_subscription_without_any_end_date_is_none():
    assert Subscription.from_record({"id": 10, "start_date": "2025-01-31"}) is None


def test_negative_remaining_classes_are_floored():
    sub = Subscription.from_record(
        {"id": 11, "end_date": "2025-08-01", "remaining_classes": -3}
    )
    assert sub.remaining_classes == 0
    assert sub.status is SubscriptionStatus.UNKNOWN


def test_partial_timestamps_are_rejected():
    assert as_datetime("2025-02") is None
    assert as_datetime("2025-07-15T08:30:00") == datetime(2025, 7, 15, 8, 30)


def test_null_row_fields_fall_back_to_plan():
    sub = Subscription.from_record(
        {
            "id": 12,
            "status": "active",
            "start_date": "2025-01-31",
            "duration": None,
            "duration_unit": None,
            "monthly_classes": None,
            "monthly_price": None,
            "subscription_plans": {
                "duration": 1,
                "duration_unit": "months",
                "monthly_classes": 8,
                "monthly_price": 60,
            },
        }
    )
    assert sub.end_date == date(2025, 2, 28)
    assert sub.monthly_class_quota == 8
    assert sub.monthly_price == 60.0


def test_fractional_duration_raises():
    with pytest.raises(InvalidArgument):
        Subscription.from_record(
            {"id": 13, "start_date": "2025-01-31", "duration": 1.5, "duration_unit": "months"}
        )
