"""
Reporting utilities for subscription and class performance.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from .class_capacity import ClassMetrics
from .data_models import Subscription, SubscriptionStatus
from .durations import calendar_date, days_until
from .subscription_status import effective_status

EXPIRING_SHORT_WINDOW = 7
EXPIRING_LONG_WINDOW = 10

_SUBSCRIPTION_COLUMNS = [
    "id",
    "plan_name",
    "status",
    "monthly_price",
    "days_remaining",
    "length_days",
]


def subscriptions_frame(subscriptions: Iterable[Subscription], today: date) -> pd.DataFrame:
    """
    One row per subscription with the calendar-corrected status.
    """

    rows = [
        {
            "id": sub.id,
            "plan_name": sub.plan_name,
            "status": effective_status(sub, today).value,
            "monthly_price": float(sub.monthly_price),
            "days_remaining": days_until(sub.end_date, today),
            "length_days": (
                (calendar_date(sub.end_date) - calendar_date(sub.start_date)).days
                if sub.start_date else np.nan
            ),
        }
        for sub in subscriptions
    ]
    if not rows:
        return pd.DataFrame(columns=_SUBSCRIPTION_COLUMNS)
    return pd.DataFrame(rows, columns=_SUBSCRIPTION_COLUMNS)


def _expiring_mask(frame: pd.DataFrame, window: int) -> pd.Series:
    return (
        (frame["status"] == SubscriptionStatus.ACTIVE.value)
        & (frame["days_remaining"] >= 0)
        & (frame["days_remaining"] <= window)
    )


def _rate(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int(np.floor(part / whole * 100 + 0.5))


def subscription_overview(
    subscriptions: Iterable[Subscription], today: date
) -> Dict[str, float]:
    """
    Compute headline subscription KPIs for the admin dashboard.

    Churn is the share of cancelled subscriptions among all of them;
    renewal is its complement.
    """

    frame = subscriptions_frame(subscriptions, today)
    total = len(frame)
    status = frame["status"]
    active = frame[status == SubscriptionStatus.ACTIVE.value]
    cancelled = int((status == SubscriptionStatus.CANCELLED.value).sum())
    finished = frame[
        status.isin([SubscriptionStatus.EXPIRED.value, SubscriptionStatus.CANCELLED.value])
    ]
    avg_length = finished["length_days"].dropna().astype(float).mean()
    mrr = float(active["monthly_price"].sum()) if len(active) else 0.0
    churn = _rate(cancelled, total)

    return {
        "total_subscriptions": float(total),
        "total_active": float(len(active)),
        "total_expired": float((status == SubscriptionStatus.EXPIRED.value).sum()),
        "total_cancelled": float(cancelled),
        "expiring_next_7_days": float(_expiring_mask(frame, EXPIRING_SHORT_WINDOW).sum()),
        "expiring_next_10_days": float(_expiring_mask(frame, EXPIRING_LONG_WINDOW).sum()),
        "total_expiring": float(_expiring_mask(frame, EXPIRING_LONG_WINDOW).sum()),
        "monthly_recurring_revenue": mrr,
        "yearly_recurring_revenue": mrr * 12,
        "average_subscription_length": float(
            np.floor(avg_length + 0.5) if not np.isnan(avg_length) else 0.0
        ),
        "churn_rate": float(churn),
        "renewal_rate": float(100 - churn),
    }


def subscriptions_by_plan(
    subscriptions: Iterable[Subscription], today: date
) -> pd.DataFrame:
    """
    Active, expiring and cancelled counts plus recurring revenue per plan.
    """

    columns = ["active", "expiring", "cancelled", "revenue", "churn_rate"]
    frame = subscriptions_frame(subscriptions, today)
    if frame.empty:
        return pd.DataFrame(columns=columns).rename_axis("plan_name")

    is_active = frame["status"] == SubscriptionStatus.ACTIVE.value
    frame = frame.assign(
        active=is_active.astype(int),
        expiring=_expiring_mask(frame, EXPIRING_LONG_WINDOW).astype(int),
        cancelled=(frame["status"] == SubscriptionStatus.CANCELLED.value).astype(int),
        revenue=np.where(is_active, frame["monthly_price"], 0.0),
    )
    plans = frame.groupby("plan_name")[["active", "expiring", "cancelled", "revenue"]].sum()
    plans["churn_rate"] = [
        _rate(int(c), int(a + c)) for a, c in zip(plans["active"], plans["cancelled"])
    ]
    return plans.sort_values("revenue", ascending=False)


def class_metrics_frame(metrics: Sequence[ClassMetrics]) -> pd.DataFrame:
    columns = [
        "class_id",
        "name",
        "date",
        "time",
        "capacity",
        "confirmed",
        "waitlist",
        "available_spots",
        "booking_percentage",
        "is_full",
    ]
    rows = [
        {
            "class_id": m.session.id,
            "name": m.session.name,
            "date": m.session.date,
            "time": m.session.time,
            "capacity": m.capacity,
            "confirmed": m.confirmed_count,
            "waitlist": m.waitlist_count,
            "available_spots": m.available_spots,
            "booking_percentage": m.booking_percentage,
            "is_full": m.is_full,
        }
        for m in metrics
    ]
    return pd.DataFrame(rows, columns=columns)
