"""
Dashboard API Endpoints.

Endpoints for the metrics snapshot and loyalty alerts.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.config import get_settings
from api.models import (
    DashboardResponse,
    LoyaltyAlertListResponse,
    LoyaltyAlertResponse,
    MetricsResponse,
    SaleLoyaltyResponse,
)
from domain.errors import DataIntegrityError
from domain.loyalty import days_until_loyalty_end, detect_loyalty_alerts, shows_loyalty_banner, take
from repositories.sale_repository import get_sale_by_id, list_sales
from services.dashboard_service import load_dashboard

router = APIRouter()


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard Metrics",
    description="Sales metrics, monthly and year-over-year series, and a preview of loyalty alerts."
)
def get_dashboard():
    """
    Build the dashboard from every sale in the store.

    The alert preview is capped by `CRM_ALERT_PREVIEW` (default 5);
    `total_alerts` reports the full count.
    """
    settings = get_settings()
    try:
        view = load_dashboard(list_sales, settings=settings)
        return DashboardResponse(
            metrics=MetricsResponse.from_snapshot(view.snapshot),
            alerts=[LoyaltyAlertResponse.from_alert(alert) for alert in view.alerts_preview],
            total_alerts=len(view.alerts),
        )
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=f"Sales data is inconsistent: {str(e)}")
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load sales: {str(e)}")


@router.get(
    "/alerts/loyalty",
    response_model=LoyaltyAlertListResponse,
    summary="Loyalty Alerts",
    description="Active contracts running for 11+ months that were not renewed."
)
def get_loyalty_alerts(
    limit: Optional[int] = Query(None, ge=0, description="Return only the first N alerts"),
):
    """
    List loyalty alerts in store order.

    **Example usage:**
    - All alerts: `GET /api/v1/alerts/loyalty`
    - Dashboard preview: `GET /api/v1/alerts/loyalty?limit=5`
    """
    try:
        alerts = detect_loyalty_alerts(list_sales(), datetime.now(timezone.utc))
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=f"Sales data is inconsistent: {str(e)}")
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load sales: {str(e)}")

    shown = alerts if limit is None else take(alerts, limit)
    return LoyaltyAlertListResponse(
        alerts=[LoyaltyAlertResponse.from_alert(alert) for alert in shown],
        total_count=len(alerts),
    )


@router.get(
    "/sales/{sale_id}/loyalty",
    response_model=SaleLoyaltyResponse,
    summary="Sale Loyalty Countdown",
    description="Days until the loyalty period of one sale ends, and whether its banner is shown."
)
def get_sale_loyalty(sale_id: str):
    try:
        sale = get_sale_by_id(sale_id)
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=f"Sale data is inconsistent: {str(e)}")
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load sale: {str(e)}")

    if sale is None:
        raise HTTPException(status_code=404, detail=f"Sale not found: {sale_id}")

    now = datetime.now(timezone.utc)
    return SaleLoyaltyResponse(
        sale_id=sale.id,
        status=sale.status.value,
        loyalty_end_date=sale.loyalty_end_date,
        days_until_end=days_until_loyalty_end(sale, now),
        show_banner=shows_loyalty_banner(sale, now),
    )
