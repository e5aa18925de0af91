"""
Staff alert feed for the reception and admin dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

import pandas as pd

from .class_capacity import ClassMetrics
from .subscription_status import EndingSoonEntry, UrgencyTier

ALERT_COLUMNS = [
    "alert_type",
    "severity",
    "alert_date",
    "subject_id",
    "subject_name",
    "days_remaining",
    "message",
]

SUBSCRIPTION_ENDING = "subscription_ending"
SUBSCRIPTION_EXPIRES_TODAY = "subscription_expires_today"
CLASS_FULL = "class_full"
CLASS_WAITLIST = "class_waitlist"


@dataclass
class AlertLogger:
    """
    Collects alert records into a single DataFrame.

    Each record is a flat dict; use `to_dataframe()` once the refresh is done.
    """

    records: List[Dict[str, Any]] = field(default_factory=list)

    def _append(self, **record: Any) -> None:
        self.records.append({column: record.get(column) for column in ALERT_COLUMNS})

    def log_subscription_ending(self, entry: EndingSoonEntry, today: date) -> None:
        """
        Log a warning/critical subscription from the ending-soon list.
        """
        tier = entry.classification.tier
        self._append(
            alert_type=SUBSCRIPTION_ENDING,
            severity="critical" if tier is UrgencyTier.CRITICAL else "warning",
            alert_date=today,
            subject_id=entry.subscription.id,
            subject_name=entry.client_name,
            days_remaining=entry.days_remaining,
            message=(
                f"{entry.client_name}: {entry.subscription.plan_name} "
                f"{entry.classification.remaining_label}"
            ),
        )

    def log_subscription_expires_today(
        self, subscription_id: Any, client_name: str, plan_name: str, today: date
    ) -> None:
        self._append(
            alert_type=SUBSCRIPTION_EXPIRES_TODAY,
            severity="critical",
            alert_date=today,
            subject_id=subscription_id,
            subject_name=client_name,
            days_remaining=0,
            message=f"{client_name}: {plan_name} expires today",
        )

    def log_class_full(self, metrics: ClassMetrics, today: date) -> None:
        session = metrics.session
        self._append(
            alert_type=CLASS_FULL,
            severity="info",
            alert_date=today,
            subject_id=session.id,
            subject_name=session.name,
            message=(
                f"{session.name or 'Class'} at {session.time or '?'} is full "
                f"({metrics.confirmed_count}/{metrics.capacity})"
            ),
        )

    def log_class_waitlist(self, metrics: ClassMetrics, today: date) -> None:
        session = metrics.session
        self._append(
            alert_type=CLASS_WAITLIST,
            severity="warning" if metrics.available_spots > 0 else "info",
            alert_date=today,
            subject_id=session.id,
            subject_name=session.name,
            message=(
                f"{session.name or 'Class'} at {session.time or '?'} has "
                f"{metrics.waitlist_count} on the waitlist"
            ),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert all logged alerts into a single DataFrame.
        """
        if not self.records:
            return pd.DataFrame(columns=ALERT_COLUMNS)
        return pd.DataFrame(self.records, columns=ALERT_COLUMNS)
