"""
Urgency classification of subscriptions for staff alerts.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .data_models import (
    UNKNOWN_CLIENT,
    Subscription,
    SubscriptionStatus,
    UserDirectory,
    UserRef,
    percent_of,
)
from .durations import days_until

CRITICAL_DAYS = 7
WARNING_DAYS = 14
UNLIMITED_QUOTA = 999


class UrgencyTier(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    EXPIRED_TODAY = "expired_today"
    EXPIRED = "expired"


ENDING_SOON_TIERS = (UrgencyTier.WARNING, UrgencyTier.CRITICAL)


@dataclass(frozen=True)
class SubscriptionClassification:
    tier: UrgencyTier
    days_remaining: int
    used_classes: int
    usage_percentage: int

    @property
    def remaining_label(self) -> str:
        return remaining_time_label(self.days_remaining)


@dataclass(frozen=True)
class EndingSoonEntry:
    """
    One row of the reception "ending soon" list.
    """

    subscription: Subscription
    classification: SubscriptionClassification
    client_name: str

    @property
    def days_remaining(self) -> int:
        return self.classification.days_remaining


def is_unlimited(quota: int) -> bool:
    return quota >= UNLIMITED_QUOTA


def tier_for(days_remaining: int) -> UrgencyTier:
    if days_remaining < 0:
        return UrgencyTier.EXPIRED
    if days_remaining == 0:
        return UrgencyTier.EXPIRED_TODAY
    if days_remaining <= CRITICAL_DAYS:
        return UrgencyTier.CRITICAL
    if days_remaining <= WARNING_DAYS:
        return UrgencyTier.WARNING
    return UrgencyTier.NORMAL


def classify(subscription: Subscription, today: date) -> SubscriptionClassification:
    """
    Classify a subscription's remaining lifetime and class usage.

    The tier depends only on ``end_date`` and ``today``; the stored status
    is not consulted.
    """

    remaining_days = days_until(subscription.end_date, today)
    quota = subscription.monthly_class_quota
    used = max(0, quota - subscription.remaining_classes)
    if is_unlimited(quota):
        usage = 0
    else:
        usage = percent_of(used, quota)
    return SubscriptionClassification(
        tier=tier_for(remaining_days),
        days_remaining=remaining_days,
        used_classes=used,
        usage_percentage=usage,
    )


def classify_all(
    subscriptions: Iterable[Subscription], today: date
) -> Dict[Any, SubscriptionClassification]:
    return {sub.id: classify(sub, today) for sub in subscriptions}


def effective_status(subscription: Subscription, today: date) -> SubscriptionStatus:
    """
    Stored status corrected by the calendar: an "active" subscription whose
    end date has passed counts as expired.
    """
    if (
        subscription.status is SubscriptionStatus.ACTIVE
        and days_until(subscription.end_date, today) < 0
    ):
        return SubscriptionStatus.EXPIRED
    return subscription.status


def remaining_time_label(days_remaining: int) -> str:
    if days_remaining < 0:
        ago = -days_remaining
        return f"Expired {ago} day{'s' if ago != 1 else ''} ago"
    if days_remaining == 0:
        return "Expires today"
    return f"{days_remaining} day{'s' if days_remaining != 1 else ''} left"


def client_name_for(
    subscription: Subscription, directory: Optional[UserDirectory] = None
) -> str:
    if subscription.client_name:
        return subscription.client_name
    if directory is not None:
        user = directory.get(subscription.user_id)
        if user is not None:
            return user.display_name
    return UNKNOWN_CLIENT


def ending_soon(
    subscriptions: Iterable[Subscription],
    today: date,
    users: Iterable[UserRef] = (),
) -> List[EndingSoonEntry]:
    """
    Active subscriptions within the warning window, soonest first.

    Ties on days remaining are ordered by client name.
    """

    directory = UserDirectory.build(users)
    entries: List[EndingSoonEntry] = []
    for sub in subscriptions:
        if sub.status is not SubscriptionStatus.ACTIVE:
            continue
        result = classify(sub, today)
        if result.tier not in ENDING_SOON_TIERS or result.days_remaining <= 0:
            continue
        entries.append(
            EndingSoonEntry(
                subscription=sub,
                classification=result,
                client_name=client_name_for(sub, directory),
            )
        )
    entries.sort(key=lambda entry: (entry.days_remaining, entry.client_name))
    return entries
