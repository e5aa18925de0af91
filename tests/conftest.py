from datetime import date, timedelta

import pytest

from studio_ops.data_models import (
    BookingRecord,
    BookingStatus,
    ClassSession,
    Subscription,
    SubscriptionStatus,
    UserRef,
)

TODAY = date(2025, 7, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def users():
    return [
        UserRef(id="u1", name="Ana", email="ana@example.com", role="client"),
        UserRef(id="u2", first_name="Besa", last_name="Krasniqi", role="client"),
        UserRef(id="u3", name="Dea", email="dea@example.com", role="client"),
        UserRef(id="i1", name="Ilir", role="instructor"),
        UserRef(id="s1", name="Reception", role="reception"),
    ]


def make_subscription(
    id=1,
    end_in=30,
    status=SubscriptionStatus.ACTIVE,
    quota=12,
    remaining=12,
    plan_name="12 Classes",
    price=80.0,
    user_id="u1",
    client_name=None,
    length=30,
    today=TODAY,
):
    end = today + timedelta(days=end_in)
    return Subscription(
        id=id,
        user_id=user_id,
        plan_name=plan_name,
        status=status,
        start_date=end - timedelta(days=length),
        end_date=end,
        monthly_class_quota=quota,
        remaining_classes=remaining,
        monthly_price=price,
        client_name=client_name,
    )


def make_session(id=1, day=0, capacity=None, max_capacity=None, time="09:00",
                 name="Reformer", instructor_id=None, today=TODAY):
    return ClassSession(
        id=id,
        date=today + timedelta(days=day),
        time=time,
        name=name,
        instructor_id=instructor_id,
        max_capacity=max_capacity,
        capacity=capacity,
    )


def make_bookings(class_id, count, status=BookingStatus.CONFIRMED, start_id=1, user_id="u1"):
    return [
        BookingRecord(id=start_id + i, class_id=class_id, user_id=user_id, status=status)
        for i in range(count)
    ]
