"""
Domain: Sales metrics for the dashboard and reports.

Pure aggregation over sale records that were already fetched. Nothing here
reads the clock: callers pass `now` once per call so every derived figure in
a snapshot refers to the same instant.

Rules implemented here:
- Monthly buckets group by calendar (year, month) of `created_at` in the
  display timezone. Only months that have at least one sale produce a bucket.
  Buckets are sorted chronologically and a trailing window is applied after
  sorting.
- The year-over-year series always has 12 points (January..December), with
  months lacking data zero-filled.
- Percentage change against a previous value of 0 is 100 when the current
  value is positive and 0 otherwise.
- "This month" means same calendar year and month as `now`, not the last
  30 days.
- Missing contract values/commissions count as zero. A missing or invalid
  `created_at` raises DataIntegrityError for the whole call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from .sale import ZERO, SaleCategory, SaleRecord, SaleStatus
from .time import (
    DEFAULT_DISPLAY_TIMEZONE,
    MONTH_ABBREVIATIONS_PT,
    calendar_month,
    month_label,
    require_utc_timestamp,
)

DEFAULT_MONTHLY_WINDOW: int = 6


@dataclass(frozen=True, slots=True)
class MonthlyBucket:
    """Sales created in one calendar month."""

    year: int
    month: int
    sales: int
    value: Decimal
    commission: Decimal

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)


@dataclass(frozen=True, slots=True)
class YearOverYearPoint:
    """Sale counts for one calendar month in the current and previous year."""

    month: int
    current_year: int
    previous_year: int

    @property
    def label(self) -> str:
        return MONTH_ABBREVIATIONS_PT[self.month - 1]


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    """
    Dashboard figures derived from one full set of sales at one instant.

    Built fresh on every aggregation; never mutated afterwards.
    """

    generated_at: datetime
    total_sales: int
    active_sales: int
    pending_sales: int
    total_value: Decimal
    total_commission: Decimal
    total_mensalidades: Decimal
    sales_this_month: int
    sales_same_month_last_year: int
    sales_change: float
    commission_this_month: Decimal
    commission_same_month_last_year: Decimal
    commission_change: float
    monthly_revenue: Decimal
    monthly: Tuple[MonthlyBucket, ...]
    year_over_year: Tuple[YearOverYearPoint, ...]
    by_category: Mapping[SaleCategory, int]
    by_status: Mapping[SaleStatus, int]


def _display_tz(tz: Optional[ZoneInfo]) -> ZoneInfo:
    return tz if tz is not None else ZoneInfo(DEFAULT_DISPLAY_TIMEZONE)


def percentage_change(current: float | Decimal | int, previous: float | Decimal | int) -> float:
    """
    Relative change from `previous` to `current`, in percent.

    A previous value of 0 never divides: the result is 100 when `current` is
    positive and 0 otherwise.
    """

    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(str(current)) - Decimal(str(previous))) / Decimal(str(previous)) * 100)


def sum_contract_value(sales: Iterable[SaleRecord]) -> Decimal:
    return sum((sale.value_or_zero for sale in sales), ZERO)


def sum_commission(sales: Iterable[SaleRecord]) -> Decimal:
    return sum((sale.commission_or_zero for sale in sales), ZERO)


def sum_telecom_mensalidades(sales: Iterable[SaleRecord]) -> Decimal:
    """Monthly telecom revenue: contract values of active telecom contracts only."""

    return sum_contract_value(
        sale
        for sale in sales
        if sale.category is SaleCategory.TELECOMUNICACOES and sale.status is SaleStatus.ATIVO
    )


def count_by_category(sales: Iterable[SaleRecord]) -> Dict[SaleCategory, int]:
    counts = {category: 0 for category in SaleCategory}
    for sale in sales:
        counts[sale.category] += 1
    return counts


def count_by_status(sales: Iterable[SaleRecord]) -> Dict[SaleStatus, int]:
    counts = {status: 0 for status in SaleStatus}
    for sale in sales:
        counts[sale.status] += 1
    return counts


def sales_in_month(
    sales: Iterable[SaleRecord],
    year: int,
    month: int,
    *,
    tz: Optional[ZoneInfo] = None,
) -> List[SaleRecord]:
    """Sales whose `created_at` falls in the given calendar month."""

    zone = _display_tz(tz)
    return [sale for sale in sales if calendar_month(sale.require_created_at(), zone) == (year, month)]


def bucket_by_month(
    sales: Iterable[SaleRecord],
    *,
    tz: Optional[ZoneInfo] = None,
    window: Optional[int] = None,
) -> List[MonthlyBucket]:
    """
    Group sales into calendar-month buckets, oldest first.

    Months without sales produce no bucket. When `window` is given, only the
    most recent `window` buckets are kept (truncation happens after sorting).
    """

    if window is not None and window < 1:
        raise ValueError("window must be >= 1")

    zone = _display_tz(tz)
    totals: Dict[Tuple[int, int], List] = {}
    for sale in sales:
        key = calendar_month(sale.require_created_at(), zone)
        entry = totals.setdefault(key, [0, ZERO, ZERO])
        entry[0] += 1
        entry[1] += sale.value_or_zero
        entry[2] += sale.commission_or_zero

    buckets = [
        MonthlyBucket(year=year, month=month, sales=count, value=value, commission=commission)
        for (year, month), (count, value, commission) in sorted(totals.items())
    ]
    if window is not None:
        buckets = buckets[-window:]
    return buckets


def year_over_year_series(
    sales: Iterable[SaleRecord],
    year: int,
    *,
    tz: Optional[ZoneInfo] = None,
) -> List[YearOverYearPoint]:
    """Twelve points comparing sale counts of `year` against `year - 1`, month by month."""

    zone = _display_tz(tz)
    current = [0] * 12
    previous = [0] * 12
    for sale in sales:
        sale_year, sale_month = calendar_month(sale.require_created_at(), zone)
        if sale_year == year:
            current[sale_month - 1] += 1
        elif sale_year == year - 1:
            previous[sale_month - 1] += 1

    return [
        YearOverYearPoint(month=index + 1, current_year=current[index], previous_year=previous[index])
        for index in range(12)
    ]


def build_snapshot(
    sales: Sequence[SaleRecord],
    now: datetime,
    *,
    tz: Optional[ZoneInfo] = None,
    window: int = DEFAULT_MONTHLY_WINDOW,
) -> MetricsSnapshot:
    """
    Aggregate the full set of sales into a MetricsSnapshot.

    Args:
        sales: Every sale visible to the caller (already filtered)
        now: UTC reference instant, read once by the caller
        tz: Display timezone for calendar-month membership
        window: Number of trailing monthly buckets to keep

    Raises:
        DataIntegrityError: If any sale lacks a valid `created_at`
    """

    require_utc_timestamp("now", now)
    zone = _display_tz(tz)

    # Fail before computing anything if a record cannot be bucketed.
    for sale in sales:
        sale.require_created_at()

    year, month = calendar_month(now, zone)
    this_month = sales_in_month(sales, year, month, tz=zone)
    same_month_last_year = sales_in_month(sales, year - 1, month, tz=zone)

    commission_now = sum_commission(this_month)
    commission_before = sum_commission(same_month_last_year)

    monthly = bucket_by_month(sales, tz=zone, window=window)
    by_status = count_by_status(sales)

    return MetricsSnapshot(
        generated_at=now,
        total_sales=len(sales),
        active_sales=by_status[SaleStatus.ATIVO],
        pending_sales=by_status[SaleStatus.PENDENTE],
        total_value=sum_contract_value(sales),
        total_commission=sum_commission(sales),
        total_mensalidades=sum_telecom_mensalidades(sales),
        sales_this_month=len(this_month),
        sales_same_month_last_year=len(same_month_last_year),
        sales_change=percentage_change(len(this_month), len(same_month_last_year)),
        commission_this_month=commission_now,
        commission_same_month_last_year=commission_before,
        commission_change=percentage_change(commission_now, commission_before),
        monthly_revenue=monthly[-1].value if monthly else ZERO,
        monthly=tuple(monthly),
        year_over_year=tuple(year_over_year_series(sales, year, tz=zone)),
        by_category=MappingProxyType(count_by_category(sales)),
        by_status=MappingProxyType(by_status),
    )


__all__ = [
    "DEFAULT_MONTHLY_WINDOW",
    "MetricsSnapshot",
    "MonthlyBucket",
    "YearOverYearPoint",
    "bucket_by_month",
    "build_snapshot",
    "count_by_category",
    "count_by_status",
    "percentage_change",
    "sales_in_month",
    "sum_commission",
    "sum_contract_value",
    "sum_telecom_mensalidades",
    "year_over_year_series",
]
