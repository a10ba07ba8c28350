"""
Sales report generation.

Applies the report filters (creation date range, category, status, seller,
partner) to the full list of sales and computes the report totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from domain.metrics import count_by_category, count_by_status, sum_commission, sum_contract_value
from domain.sale import SaleCategory, SaleRecord, SaleStatus
from domain.time import require_utc_timestamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReportFilters:
    """
    Optional report filters. Unset filters match everything.

    `start` and `end` are inclusive bounds on `created_at` (UTC).
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    category: Optional[SaleCategory] = None
    status: Optional[SaleStatus] = None
    seller_id: Optional[str] = None
    partner_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.start is not None:
            require_utc_timestamp("start", self.start)
        if self.end is not None:
            require_utc_timestamp("end", self.end)
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("start must be <= end")

    def matches(self, sale: SaleRecord) -> bool:
        if self.start is not None and sale.require_created_at() < self.start:
            return False
        if self.end is not None and sale.require_created_at() > self.end:
            return False
        if self.category is not None and sale.category is not self.category:
            return False
        if self.status is not None and sale.status is not self.status:
            return False
        if self.seller_id is not None and sale.seller_id != self.seller_id:
            return False
        if self.partner_id is not None and sale.partner_id != self.partner_id:
            return False
        return True


@dataclass(frozen=True, slots=True)
class SalesReport:
    filters: ReportFilters
    sales: List[SaleRecord]
    total_sales: int
    total_value: Decimal
    total_commission: Decimal
    by_category: Dict[SaleCategory, int]
    by_status: Dict[SaleStatus, int]


def generate_report(sales: Sequence[SaleRecord], filters: Optional[ReportFilters] = None) -> SalesReport:
    """
    Build a SalesReport from all sales and the requested filters.

    Example:
        report = generate_report(list_sales(), ReportFilters(status=SaleStatus.ATIVO))
        print(f"{report.total_sales} active sales worth {report.total_value} EUR")
    """

    filters = filters or ReportFilters()
    selected = [sale for sale in sales if filters.matches(sale)]

    logger.info(
        "Report generated",
        extra={"sales_total": len(sales), "sales_selected": len(selected)},
    )

    return SalesReport(
        filters=filters,
        sales=selected,
        total_sales=len(selected),
        total_value=sum_contract_value(selected),
        total_commission=sum_commission(selected),
        by_category=count_by_category(selected),
        by_status=count_by_status(selected),
    )


__all__ = ["ReportFilters", "SalesReport", "generate_report"]
