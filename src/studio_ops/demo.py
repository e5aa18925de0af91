"""
End-to-end demo wiring together the studio_ops components
over synthetic studio data.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Tuple

import numpy as np

from . import dashboard, monitoring
from .durations import calculate_end_date

PLANS = [
    # name, monthly classes, price, duration, unit
    ("Day Pass", 1, 10.0, 1, "days"),
    ("8 Classes", 8, 60.0, 1, "months"),
    ("12 Classes", 12, 80.0, 1, "months"),
    ("Unlimited", 999, 120.0, 3, "months"),
    ("Annual Unlimited", 999, 100.0, 1, "years"),
]

CLASS_NAMES = ["Mat Pilates", "Reformer", "Reformer Advanced", "Barre", "Stretch"]
CLASS_TIMES = ["07:00", "09:30", "12:00", "18:00", "19:30"]


def synthetic_studio_data(
    today: date, num_clients: int = 40, seed: int = 42
) -> Tuple[List[Dict[str, Any]], ...]:
    """
    Create fake users, classes, bookings and subscriptions rows shaped like
    the data service's responses.
    """
    rng = np.random.default_rng(seed=seed)

    users: List[Dict[str, Any]] = [
        {"id": f"instructor_{i}", "name": f"Instructor {i}", "role": "instructor"}
        for i in range(3)
    ]
    for i in range(num_clients):
        users.append(
            {
                "id": f"client_{i}",
                "first_name": "Client",
                "last_name": str(i),
                "email": f"client{i}@example.com",
                "role": "client",
            }
        )

    classes: List[Dict[str, Any]] = []
    for offset in range(-1, 9):
        for slot in range(int(rng.integers(1, 4))):
            classes.append(
                {
                    "id": len(classes) + 1,
                    "name": CLASS_NAMES[int(rng.integers(len(CLASS_NAMES)))],
                    "date": (today + timedelta(days=offset)).isoformat(),
                    "time": CLASS_TIMES[slot],
                    "instructor_id": f"instructor_{int(rng.integers(3))}",
                    "max_capacity": int(rng.choice([0, 6, 8, 10])),
                }
            )

    statuses = ["confirmed", "confirmed", "confirmed", "waitlist", "cancelled"]
    bookings: List[Dict[str, Any]] = []
    for class_ in classes:
        for _ in range(int(rng.integers(0, 12))):
            bookings.append(
                {
                    "id": len(bookings) + 1,
                    "class_id": class_["id"],
                    "user_id": f"client_{int(rng.integers(num_clients + 2))}",
                    "status": statuses[int(rng.integers(len(statuses)))],
                }
            )

    subscriptions: List[Dict[str, Any]] = []
    for i in range(num_clients):
        name, quota, price, duration, unit = PLANS[int(rng.integers(len(PLANS)))]
        start = today - timedelta(days=int(rng.integers(0, 120)))
        end = calculate_end_date(start, duration, unit)
        status = "active" if end >= today else "expired"
        if rng.random() < 0.1:
            status = "cancelled"
        subscriptions.append(
            {
                "id": i + 1,
                "user_id": f"client_{i}",
                "status": status,
                "start_date": start.isoformat(),
                # every third row leaves the end date to the plan duration
                "end_date": None if i % 3 == 0 else end.isoformat(),
                "remaining_classes": int(rng.integers(0, min(quota, 12) + 1)),
                "subscription_plans": {
                    "name": name,
                    "monthly_classes": quota,
                    "monthly_price": price,
                    "duration": duration,
                    "duration_unit": unit,
                },
            }
        )
    return users, classes, bookings, subscriptions


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    today = date.today()
    users, classes, bookings, subscriptions = synthetic_studio_data(today)

    board = dashboard.build_operations_dashboard(
        users, classes, bookings, subscriptions, today
    )

    summary = board.capacity.day_summary
    print(f"[main] Classes today: {summary.total_classes} ({summary.full_classes_count} full)")
    print(f"[main] Confirmed today: {summary.total_confirmed_bookings}, "
          f"waitlisted: {summary.waitlist_total}, open spots: {summary.available_spots_total}")
    print("[main] Today's classes:")
    print(monitoring.class_metrics_frame(board.capacity.today))

    print(f"[main] Subscriptions ending soon: {len(board.ending_soon)}")
    for entry in board.ending_soon:
        print(f"  {entry.client_name:<12} {entry.subscription.plan_name:<18} "
              f"{entry.classification.remaining_label}")

    print("[main] Subscription overview:", board.overview)
    print("[main] By plan:")
    print(board.plans)
    print(f"[main] {len(board.alerts)} alerts")
    print(board.alerts.head())


if __name__ == "__main__":
    main()
