"""
Per-class capacity, waitlist and availability metrics bucketed by day.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from .data_models import (
    BookingRecord,
    BookingStatus,
    ClassSession,
    ClientRef,
    UserDirectory,
    UserRef,
    percent_of,
)
from .durations import calendar_date

DEFAULT_CLASS_CAPACITY = 8
WEEK_DAYS = 7

CONFIRMED_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.ACTIVE})


class DayBucket(Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"


@dataclass(frozen=True)
class InstructorRef:
    id: Any
    name: str


@dataclass(frozen=True)
class ClassMetrics:
    session: ClassSession
    capacity: int
    confirmed_count: int
    waitlist_count: int
    is_full: bool
    available_spots: int
    booking_percentage: int
    confirmed_clients: List[ClientRef] = field(default_factory=list)
    waitlist_clients: List[ClientRef] = field(default_factory=list)
    waitlist_booking_ids: List[Any] = field(default_factory=list)
    instructor: Optional[InstructorRef] = None


@dataclass(frozen=True)
class DaySummary:
    total_classes: int = 0
    full_classes_count: int = 0
    waitlist_total: int = 0
    total_confirmed_bookings: int = 0
    available_spots_total: int = 0


@dataclass(frozen=True)
class CapacityReport:
    today: List[ClassMetrics]
    tomorrow: List[ClassMetrics]
    this_week: List[ClassMetrics]
    day_summary: DaySummary

    @property
    def full_classes_today(self) -> List[ClassMetrics]:
        return [metrics for metrics in self.today if metrics.is_full]

    def bucket(self, which: DayBucket) -> List[ClassMetrics]:
        return {
            DayBucket.TODAY: self.today,
            DayBucket.TOMORROW: self.tomorrow,
            DayBucket.THIS_WEEK: self.this_week,
        }[which]


def effective_capacity(session: ClassSession) -> int:
    """
    ``max_capacity``, else ``capacity``, else the studio default of 8.
    Zero or negative values count as absent.
    """
    for value in (session.max_capacity, session.capacity):
        if value is not None and value > 0:
            return value
    return DEFAULT_CLASS_CAPACITY


def buckets_for(session_date: Optional[date], today: date) -> Set[DayBucket]:
    """
    Day buckets a class date falls into. Tomorrow is also part of the week.
    """
    found: Set[DayBucket] = set()
    if session_date is None:
        return found
    session_date = calendar_date(session_date)
    today = calendar_date(today)
    if session_date == today:
        found.add(DayBucket.TODAY)
    if session_date == today + timedelta(days=1):
        found.add(DayBucket.TOMORROW)
    if today < session_date <= today + timedelta(days=WEEK_DAYS):
        found.add(DayBucket.THIS_WEEK)
    return found


def _instructor_for(
    session: ClassSession, directory: UserDirectory
) -> Optional[InstructorRef]:
    if session.instructor_id is None:
        return None
    user = directory.get(session.instructor_id)
    if user is None or (user.role or "").lower() != "instructor":
        return None
    name = user.display_name
    if not (user.name or user.first_name or user.last_name):
        name = "Unknown Instructor"
    return InstructorRef(id=user.id, name=name)


def class_metrics(
    session: ClassSession,
    bookings: Sequence[BookingRecord],
    directory: UserDirectory,
) -> ClassMetrics:
    """
    Metrics for one session given the bookings that reference it.

    Overbooked classes keep a booking percentage above 100.
    """

    confirmed = [b for b in bookings if b.status in CONFIRMED_STATUSES]
    waitlist = [b for b in bookings if b.status is BookingStatus.WAITLIST]
    capacity = effective_capacity(session)
    confirmed_count = len(confirmed)

    return ClassMetrics(
        session=session,
        capacity=capacity,
        confirmed_count=confirmed_count,
        waitlist_count=len(waitlist),
        is_full=confirmed_count >= capacity,
        available_spots=max(0, capacity - confirmed_count),
        booking_percentage=percent_of(confirmed_count, capacity),
        confirmed_clients=[directory.client(b.user_id, "confirmed") for b in confirmed],
        waitlist_clients=[directory.client(b.user_id, "waitlist") for b in waitlist],
        waitlist_booking_ids=[b.id for b in waitlist],
        instructor=_instructor_for(session, directory),
    )


def summarize_day(metrics: Iterable[ClassMetrics]) -> DaySummary:
    total_classes = 0
    full_classes = 0
    confirmed = 0
    spots = 0
    seen_waitlist: Set[Any] = set()
    anonymous_waitlist = 0
    for item in metrics:
        total_classes += 1
        full_classes += int(item.is_full)
        confirmed += item.confirmed_count
        spots += item.available_spots
        for booking_id in item.waitlist_booking_ids:
            if booking_id is None:
                anonymous_waitlist += 1
            else:
                seen_waitlist.add(booking_id)
    return DaySummary(
        total_classes=total_classes,
        full_classes_count=full_classes,
        waitlist_total=len(seen_waitlist) + anonymous_waitlist,
        total_confirmed_bookings=confirmed,
        available_spots_total=spots,
    )


def _id_key(value: Any):
    # numeric ids compare as numbers and sort ahead of text ids
    if isinstance(value, int) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, str(value))


def _sort_key(metrics: ClassMetrics):
    session = metrics.session
    return (session.date or date.min, session.time or "", _id_key(session.id))


def aggregate(
    classes: Iterable[ClassSession],
    bookings: Iterable[BookingRecord],
    users: Iterable[UserRef],
    today: date,
) -> CapacityReport:
    """
    Build the today / tomorrow / this-week class views and today's summary.

    Inputs are only read; each call recomputes everything from scratch.
    """

    today = calendar_date(today)
    directory = UserDirectory.build(users)
    by_class: Dict[Any, List[BookingRecord]] = defaultdict(list)
    for booking in bookings:
        by_class[booking.class_id].append(booking)

    grouped: Dict[DayBucket, List[ClassMetrics]] = {bucket: [] for bucket in DayBucket}
    for session in classes:
        found = buckets_for(session.date, today)
        if not found:
            continue
        metrics = class_metrics(session, by_class.get(session.id, []), directory)
        for bucket in found:
            grouped[bucket].append(metrics)

    for items in grouped.values():
        items.sort(key=_sort_key)

    return CapacityReport(
        today=grouped[DayBucket.TODAY],
        tomorrow=grouped[DayBucket.TOMORROW],
        this_week=grouped[DayBucket.THIS_WEEK],
        day_summary=summarize_day(grouped[DayBucket.TODAY]),
    )
