"""
Builds the unified operations dashboard from already-fetched collections.

This is the thin shell around the pure modules: it coerces raw records,
threads a single ``today`` through every computation and collects the
results. It performs no I/O of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar, Union

import pandas as pd

from . import alerts, class_capacity, monitoring, subscription_status
from .data_models import (
    BookingRecord,
    ClassSession,
    Subscription,
    SubscriptionStatus,
    UserDirectory,
    UserRef,
    as_date,
)
from .durations import InvalidArgument

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class OperationsDashboard:
    today: date
    capacity: class_capacity.CapacityReport
    classifications: Dict[Any, subscription_status.SubscriptionClassification]
    ending_soon: List[subscription_status.EndingSoonEntry]
    overview: Dict[str, float]
    plans: pd.DataFrame
    alerts: pd.DataFrame
    skipped_subscriptions: int = 0


def _load(
    items: Iterable[Union[T, Mapping[str, Any]]],
    model: type,
    factory: Callable[[Mapping[str, Any]], Optional[T]],
) -> List[T]:
    loaded: List[T] = []
    for item in items:
        if isinstance(item, model):
            loaded.append(item)
            continue
        value = factory(item)
        if value is not None:
            loaded.append(value)
    return loaded


def load_subscriptions(
    records: Iterable[Union[Subscription, Mapping[str, Any]]]
) -> List[Subscription]:
    """
    Coerce subscription rows, skipping the ones that have no usable end date.

    A bad plan duration only drops its own row.
    """

    loaded: List[Subscription] = []
    for record in records:
        if isinstance(record, Subscription):
            loaded.append(record)
            continue
        try:
            sub = Subscription.from_record(record)
        except InvalidArgument as exc:
            log.warning("Skipping subscription %s: %s", record.get("id"), exc)
            continue
        if sub is None:
            log.warning("Skipping subscription %s: no end date", record.get("id"))
            continue
        loaded.append(sub)
    return loaded


def build_operations_dashboard(
    users: Iterable[Any],
    classes: Iterable[Any],
    bookings: Iterable[Any],
    subscriptions: Iterable[Any],
    today: Any,
) -> OperationsDashboard:
    """
    Compute every derived view for one refresh cycle.

    Parameters
    ----------
    users, classes, bookings, subscriptions:
        Typed models or raw data-service rows.
    today:
        The refresh date. Every time-relative figure uses this one value.
    """

    refresh_date = as_date(today)
    if refresh_date is None:
        raise InvalidArgument(f"Invalid refresh date: {today!r}")

    user_list = _load(users, UserRef, UserRef.from_record)
    class_list = _load(classes, ClassSession, ClassSession.from_record)
    booking_list = _load(bookings, BookingRecord, BookingRecord.from_record)
    raw_subscriptions = list(subscriptions)
    subscription_list = load_subscriptions(raw_subscriptions)
    skipped = len(raw_subscriptions) - len(subscription_list)

    capacity = class_capacity.aggregate(class_list, booking_list, user_list, refresh_date)
    results = [subscription_status.classify(sub, refresh_date) for sub in subscription_list]
    classifications = {sub.id: result for sub, result in zip(subscription_list, results)}
    ending = subscription_status.ending_soon(subscription_list, refresh_date, user_list)

    logger = alerts.AlertLogger()
    directory = UserDirectory.build(user_list)
    for entry in ending:
        logger.log_subscription_ending(entry, refresh_date)
    for sub, result in zip(subscription_list, results):
        if (
            sub.status is SubscriptionStatus.ACTIVE
            and result.tier is subscription_status.UrgencyTier.EXPIRED_TODAY
        ):
            logger.log_subscription_expires_today(
                sub.id,
                subscription_status.client_name_for(sub, directory),
                sub.plan_name,
                refresh_date,
            )
    for metrics in capacity.today:
        if metrics.is_full:
            logger.log_class_full(metrics, refresh_date)
        if metrics.waitlist_count:
            logger.log_class_waitlist(metrics, refresh_date)

    summary = capacity.day_summary
    log.info(
        "Dashboard for %s: %d classes today (%d full), %d ending soon, %d skipped",
        refresh_date,
        summary.total_classes,
        summary.full_classes_count,
        len(ending),
        skipped,
    )

    return OperationsDashboard(
        today=refresh_date,
        capacity=capacity,
        classifications=classifications,
        ending_soon=ending,
        overview=monitoring.subscription_overview(subscription_list, refresh_date),
        plans=monitoring.subscriptions_by_plan(subscription_list, refresh_date),
        alerts=logger.to_dataframe(),
        skipped_subscriptions=skipped,
    )
