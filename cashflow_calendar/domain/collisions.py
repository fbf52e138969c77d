"""Bill collision detection - days where several bills land at once"""

from dataclasses import dataclass
from typing import Iterable

from cashflow_calendar.domain.models import (
    BillCollision,
    CalendarDay,
    CollisionBill,
    CollisionSeverity,
    CollisionSummary,
)


@dataclass(frozen=True)
class CollisionThresholds:
    min_bills_for_warning: int = 2
    min_bills_for_critical: int = 4
    critical_amount_threshold_cents: int = 100_000  # $1000


def detect_collisions(
    days: Iterable[CalendarDay],
    min_bills_for_warning: int = 2,
    min_bills_for_critical: int = 4,
    critical_amount_threshold_cents: int = 100_000,
) -> CollisionSummary:
    """
    Find days where multiple bills are due together.

    Requirements:
    - Zero-amount bills are ignored (they cannot strain cash flow)
    - A day is a collision once it has min_bills_for_warning non-zero bills
    - Critical when bill count reaches min_bills_for_critical OR the day's
      total exceeds critical_amount_threshold_cents
    - Collisions are returned in chronological order; the input is not modified
    """
    collisions = []

    for day in days:
        bills = [bill for bill in day.bills if bill.amount_cents > 0]
        if len(bills) < min_bills_for_warning:
            continue

        total = sum(bill.amount_cents for bill in bills)
        if len(bills) >= min_bills_for_critical or total > critical_amount_threshold_cents:
            severity = CollisionSeverity.CRITICAL
        else:
            severity = CollisionSeverity.WARNING

        collisions.append(
            BillCollision(
                date=day.date,
                bills=[CollisionBill(id=b.source_id, name=b.name, amount_cents=b.amount_cents) for b in bills],
                total_amount_cents=total,
                severity=severity,
            )
        )

    collisions.sort(key=lambda c: c.date)

    summary = CollisionSummary(collisions=collisions, has_collisions=bool(collisions))
    for collision in collisions:
        if collision.severity is CollisionSeverity.CRITICAL:
            summary.critical_count += 1
        else:
            summary.warning_count += 1

        # Strictly greater keeps the earliest of equal totals
        if collision.total_amount_cents > summary.highest_collision_amount_cents:
            summary.highest_collision_amount_cents = collision.total_amount_cents
            summary.highest_collision_date = collision.date

    return summary


def detect_collisions_with(days: Iterable[CalendarDay], thresholds: CollisionThresholds) -> CollisionSummary:
    return detect_collisions(
        days,
        min_bills_for_warning=thresholds.min_bills_for_warning,
        min_bills_for_critical=thresholds.min_bills_for_critical,
        critical_amount_threshold_cents=thresholds.critical_amount_threshold_cents,
    )
