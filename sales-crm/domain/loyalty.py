"""
Domain: Loyalty (lock-in) alerts.

Two independent signals share the same sale fields and must stay separate:

- Review due (alert list): an active contract with an `active_date` that has
  been running for at least 11 "months", where a month is a fixed 30-day
  interval:
      months_active = (now - active_date) / 30 days
  Contracts already renewed are excluded. A contract is renewed when another
  sale (different id) of type `refid` exists for the same client name AND
  address with a strictly later `created_at`.

- Banner (single sale view): an active contract whose loyalty period ends
  within 210 days:
      days_until_end = max(0, ceil((loyalty_end_date - now) / 1 day))

Alerts keep the scan order of the input. Truncation for display is done with
`take`, not inside detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from .sale import SaleCategory, SaleRecord
from .time import require_utc_timestamp, utc_midnight

REVIEW_AFTER_MONTHS: int = 11
DAYS_PER_MONTH: int = 30
BANNER_THRESHOLD_DAYS: int = 210


@dataclass(frozen=True, slots=True)
class LoyaltyAlert:
    """A contract approaching (or past) the end of its loyalty period."""

    sale_id: str
    client_name: str
    partner_name: Optional[str]
    category: SaleCategory
    days_until_end: Optional[int]
    loyalty_end_date: Optional[date]


def months_active(sale: SaleRecord, now: datetime) -> Optional[float]:
    """Elapsed time since `active_date` in 30-day months, or None without an active date."""

    if sale.active_date is None:
        return None
    return (now - utc_midnight(sale.active_date)) / timedelta(days=DAYS_PER_MONTH)


def days_until_loyalty_end(sale: SaleRecord, now: datetime) -> Optional[int]:
    """Whole days (rounded up, never negative) until `loyalty_end_date`."""

    if sale.loyalty_end_date is None:
        return None
    remaining = (utc_midnight(sale.loyalty_end_date) - now) / timedelta(days=1)
    return max(0, math.ceil(remaining))


def is_renewed(sale: SaleRecord, sales: Sequence[SaleRecord]) -> bool:
    """True if a later `refid` sale exists for the same client name and address."""

    created_at = sale.require_created_at()
    for other in sales:
        if other.id == sale.id or not other.is_renewal:
            continue
        if other.client_name != sale.client_name or other.client_address != sale.client_address:
            continue
        if other.require_created_at() > created_at:
            return True
    return False


def is_loyalty_review_due(sale: SaleRecord, sales: Sequence[SaleRecord], now: datetime) -> bool:
    """Alert-list predicate: active for 11+ thirty-day months and not yet renewed."""

    if not sale.is_active:
        return False
    elapsed = months_active(sale, now)
    if elapsed is None or elapsed < REVIEW_AFTER_MONTHS:
        return False
    return not is_renewed(sale, sales)


def shows_loyalty_banner(sale: SaleRecord, now: datetime) -> bool:
    """Single-sale banner predicate: active and loyalty ends within 210 days."""

    if not sale.is_active:
        return False
    days = days_until_loyalty_end(sale, now)
    return days is not None and days <= BANNER_THRESHOLD_DAYS


def build_alert(sale: SaleRecord, now: datetime) -> LoyaltyAlert:
    return LoyaltyAlert(
        sale_id=sale.id,
        client_name=sale.client_name,
        partner_name=sale.partner_name,
        category=sale.category,
        days_until_end=days_until_loyalty_end(sale, now),
        loyalty_end_date=sale.loyalty_end_date,
    )


def detect_loyalty_alerts(sales: Sequence[SaleRecord], now: datetime) -> List[LoyaltyAlert]:
    """
    Scan all sales and return alerts for contracts due for a loyalty review.

    The renewal check compares every candidate against every `refid` sale.
    Order of the result follows the order of `sales`.
    """

    require_utc_timestamp("now", now)
    renewals = [sale for sale in sales if sale.is_renewal]
    return [build_alert(sale, now) for sale in sales if is_loyalty_review_due(sale, renewals, now)]


def take(alerts: Sequence[LoyaltyAlert], n: int) -> List[LoyaltyAlert]:
    """First `n` alerts, for surfaces that only show a preview."""

    if n < 0:
        raise ValueError("n must be >= 0")
    return list(alerts[:n])


__all__ = [
    "BANNER_THRESHOLD_DAYS",
    "DAYS_PER_MONTH",
    "LoyaltyAlert",
    "REVIEW_AFTER_MONTHS",
    "build_alert",
    "days_until_loyalty_end",
    "detect_loyalty_alerts",
    "is_loyalty_review_due",
    "is_renewed",
    "months_active",
    "shows_loyalty_banner",
    "take",
]
