"""
Core data models used across the studio_ops package.

Records arrive from the studio data service as plain dicts, sometimes with
joined rows nested under ``users`` or ``subscription_plans``. The
``from_record`` constructors coerce them into the dataclasses below and
degrade quietly on malformed fields instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import dateutil.parser

from .durations import calculate_end_date

log = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"
NO_EMAIL = "No email"
UNKNOWN_PLAN = "Unknown Plan"


# two defaults that differ in every date part; a string parsed to the same
# day under both spells out its year, month and day
_PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_full(value: str) -> Optional[datetime]:
    """
    Parse a timestamp string that names a full calendar date.

    ``dateutil`` fills missing parts from its ``default``; partial strings
    such as ``"2025-02"`` are rejected instead of being completed.
    """
    try:
        first, second = (dateutil.parser.parse(value, default=d) for d in _PARSE_DEFAULTS)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first


def as_date(value: Any) -> Optional[date]:
    """
    Coerce a date-like value to a calendar date.

    Accepts ``date``, ``datetime`` (its date part) and strings that
    ``dateutil`` can parse to a full date. Anything else gives ``None``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = _parse_full(value)
        if parsed is None:
            log.warning("Could not parse date %r", value)
            return None
        return parsed.date()
    log.warning("Unsupported date value %r", value)
    return None


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        parsed = _parse_full(value)
        if parsed is None:
            log.warning("Could not parse timestamp %r", value)
        return parsed
    return None


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _nested(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    # joined rows come back either as a dict or as a one-element list
    value = record.get(key)
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, Mapping) else {}


def _field(record: Mapping[str, Any], plan: Mapping[str, Any], key: str) -> Any:
    # rows carry plan columns as explicit nulls when the join supplies them
    value = record.get(key)
    return plan.get(key) if value is None else value


def percent_of(part: int, whole: int) -> int:
    """
    Integer percentage of ``part / whole`` rounded half up.

    Uses integer arithmetic so 5/8 gives 63, not the 62 that Python's
    round-half-even would produce for 62.5.
    """
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


class SubscriptionStatus(Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "SubscriptionStatus":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if text == "canceled":
            text = "cancelled"
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN


class BookingStatus(Enum):
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    WAITLIST = "waitlist"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    COMPLETED = "completed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("-", "_")
        aliases = {"canceled": "cancelled", "noshow": "no_show", "waitlisted": "waitlist"}
        text = aliases.get(text, text)
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class UserRef:
    """
    A user as seen by the dashboards: clients, instructors and staff.
    """

    id: Any
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        full = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full or UNKNOWN_CLIENT

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UserRef":
        return cls(
            id=record.get("id"),
            name=record.get("name"),
            first_name=record.get("first_name"),
            last_name=record.get("last_name"),
            email=record.get("email"),
            role=record.get("role"),
        )


@dataclass(frozen=True)
class ClientRef:
    """
    A booking's client, resolved for display.
    """

    id: Any
    name: str = UNKNOWN_CLIENT
    email: str = NO_EMAIL
    status: str = "confirmed"


@dataclass(frozen=True)
class ClassSession:
    """
    One scheduled class. ``capacity`` fields are raw; see
    ``class_capacity.effective_capacity`` for the policy.
    """

    id: Any
    date: Optional[date]
    time: Optional[str] = None
    name: Optional[str] = None
    instructor_id: Any = None
    max_capacity: Optional[int] = None
    capacity: Optional[int] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ClassSession":
        return cls(
            id=record.get("id"),
            date=as_date(record.get("date")),
            time=record.get("time"),
            name=record.get("name"),
            instructor_id=record.get("instructor_id"),
            max_capacity=_as_int(record.get("max_capacity")),
            capacity=_as_int(record.get("capacity")),
        )


@dataclass(frozen=True)
class BookingRecord:
    id: Any
    class_id: Any
    user_id: Any
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "BookingRecord":
        return cls(
            id=record.get("id"),
            class_id=record.get("class_id"),
            user_id=record.get("user_id"),
            status=BookingStatus.parse(record.get("status")),
            created_at=as_datetime(record.get("created_at")),
        )


@dataclass(frozen=True)
class Subscription:
    """
    A client's subscription to a plan.

    ``status`` is the stored flag written by the assignment workflow and
    may lag behind ``end_date``.
    """

    id: Any
    user_id: Any
    plan_name: str
    status: SubscriptionStatus
    start_date: Optional[date]
    end_date: date
    monthly_class_quota: int = 0
    remaining_classes: int = 0
    equipment_access: Optional[str] = None
    monthly_price: float = 0.0
    client_name: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["Subscription"]:
        """
        Build a subscription from a data-service row.

        A missing ``end_date`` is derived from the plan duration when the
        row carries one, which may raise ``InvalidArgument`` for a bad
        duration. Returns ``None`` when no end date can be established.
        """
        plan = _nested(record, "subscription_plans")
        user = _nested(record, "users")

        start_date = as_date(record.get("start_date"))
        end_date = as_date(record.get("end_date"))
        if end_date is None:
            duration = _field(record, plan, "duration")
            unit = _field(record, plan, "duration_unit")
            if start_date is not None and duration is not None and unit is not None:
                end_date = calculate_end_date(start_date, duration, unit)
        if end_date is None:
            return None

        quota = _as_int(_field(record, plan, "monthly_classes"), default=0)
        price = _as_float(_field(record, plan, "monthly_price"))
        return cls(
            id=record.get("id"),
            user_id=record.get("user_id"),
            plan_name=record.get("plan_name") or plan.get("name") or UNKNOWN_PLAN,
            status=SubscriptionStatus.parse(record.get("status")),
            start_date=start_date,
            end_date=end_date,
            monthly_class_quota=quota,
            remaining_classes=max(0, _as_int(record.get("remaining_classes"), default=0)),
            equipment_access=_field(record, plan, "equipment_access"),
            monthly_price=price,
            client_name=user.get("name") or record.get("user_name"),
        )


@dataclass
class UserDirectory:
    """
    Lookup of users by id, built once per refresh.
    """

    users: Dict[Any, UserRef] = field(default_factory=dict)

    @classmethod
    def build(cls, users) -> "UserDirectory":
        return cls({user.id: user for user in users})

    def get(self, user_id: Any) -> Optional[UserRef]:
        return self.users.get(user_id)

    def client(self, user_id: Any, status: str) -> ClientRef:
        user = self.users.get(user_id)
        if user is None:
            return ClientRef(id=user_id, status=status)
        return ClientRef(
            id=user.id,
            name=user.display_name,
            email=user.email or NO_EMAIL,
            status=status,
        )
