"""
Dashboard service.

Assembles what the dashboard shows from one fetch of all sales: the metrics
snapshot, the full loyalty alert list and a short preview of it. The clock is
read once per call so every figure refers to the same instant.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from domain.loyalty import LoyaltyAlert, detect_loyalty_alerts, take
from domain.metrics import MetricsSnapshot, build_snapshot
from domain.sale import SaleRecord
from services.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DashboardView:
    snapshot: MetricsSnapshot
    alerts: List[LoyaltyAlert]
    alerts_preview: List[LoyaltyAlert]


def build_dashboard(
    sales: Sequence[SaleRecord],
    now: datetime,
    settings: Optional[Settings] = None,
) -> DashboardView:
    """
    Build the dashboard for an already-fetched list of sales.

    Raises:
        DataIntegrityError: If any sale cannot be bucketed (no partial dashboard)
    """

    settings = settings or load_settings()

    snapshot = build_snapshot(
        sales,
        now,
        tz=settings.display_timezone,
        window=settings.dashboard_months,
    )
    alerts = detect_loyalty_alerts(sales, now)

    logger.debug(
        "Dashboard built",
        extra={
            "sales": len(sales),
            "buckets": len(snapshot.monthly),
            "alerts": len(alerts),
        },
    )

    return DashboardView(
        snapshot=snapshot,
        alerts=alerts,
        alerts_preview=take(alerts, settings.alert_preview),
    )


def load_dashboard(
    fetch_sales: Callable[[], List[SaleRecord]],
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> DashboardView:
    """
    Fetch every sale and build the dashboard.

    Args:
        fetch_sales: Store accessor returning all sales (e.g. `list_sales`)
        now: Reference instant; read from the clock once when omitted
        settings: Display settings; loaded from the environment when omitted
    """

    if now is None:
        now = datetime.now(timezone.utc)
    return build_dashboard(fetch_sales(), now, settings)


__all__ = ["DashboardView", "build_dashboard", "load_dashboard"]
