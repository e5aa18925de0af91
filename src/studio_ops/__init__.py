"""
studio_ops
==========

Subscription lifecycle and class-capacity computations behind the studio
management dashboards.

The package groups together data models, calendar duration arithmetic,
subscription urgency classification, class capacity aggregation,
reporting helpers and the staff alert feed. Every function takes the
current date as an argument and works on collections that were already
fetched from the studio data service.
"""

from . import (
    alerts,
    class_capacity,
    dashboard,
    data_models,
    durations,
    monitoring,
    subscription_status,
)
from .durations import InvalidArgument

__all__ = [
    "InvalidArgument",
    "alerts",
    "class_capacity",
    "dashboard",
    "data_models",
    "durations",
    "monitoring",
    "subscription_status",
]
