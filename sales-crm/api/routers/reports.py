"""
Reports API Endpoints.

Endpoints for filtered sales reports and their CSV export.
"""

from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException, Query, Response

from api.config import get_settings, local_to_utc
from api.models import ReportResponse
from domain.errors import DataIntegrityError
from domain.sale import SaleCategory, SaleStatus
from repositories.sale_repository import list_sales
from services.csv_export_service import generate_report_csv
from services.report_service import ReportFilters, SalesReport, generate_report

router = APIRouter()


def _build_report(
    start: Optional[datetime],
    end: Optional[datetime],
    category: Optional[str],
    status: Optional[str],
    seller_id: Optional[str],
    partner_id: Optional[str],
    tz: ZoneInfo,
) -> SalesReport:
    try:
        filters = ReportFilters(
            start=local_to_utc(start, tz),
            end=local_to_utc(end, tz),
            category=SaleCategory(category) if category else None,
            status=SaleStatus(status) if status else None,
            seller_id=seller_id,
            partner_id=partner_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid report filters: {str(e)}")

    try:
        return generate_report(list_sales(), filters)
    except DataIntegrityError as e:
        raise HTTPException(status_code=422, detail=f"Sales data is inconsistent: {str(e)}")
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=f"Failed to load sales: {str(e)}")


@router.get(
    "/reports",
    response_model=ReportResponse,
    summary="Sales Report",
    description="Filter sales by creation date, category, status, seller and partner, with totals."
)
def get_report(
    start: Optional[datetime] = Query(None, description="Created at or after (ISO-8601, display timezone if naive)"),
    end: Optional[datetime] = Query(None, description="Created at or before (ISO-8601, display timezone if naive)"),
    category: Optional[str] = Query(None, description="energia, telecomunicacoes or paineis_solares"),
    status: Optional[str] = Query(None, description="em_negociacao, pendente, ativo, perdido or anulado"),
    seller_id: Optional[str] = Query(None, description="Filter by seller"),
    partner_id: Optional[str] = Query(None, description="Filter by partner"),
):
    """
    **Example usage:**
    - Everything: `GET /api/v1/reports`
    - Active telecom in 2024: `GET /api/v1/reports?category=telecomunicacoes&status=ativo&start=2024-01-01T00:00:00Z&end=2024-12-31T23:59:59Z`
    """
    settings = get_settings()
    report = _build_report(start, end, category, status, seller_id, partner_id, settings.display_timezone)
    return ReportResponse.from_report(report)


@router.get(
    "/reports/export.csv",
    summary="Export Sales Report",
    description="Same filters as /reports, rendered as a semicolon-separated CSV file."
)
def export_report(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    seller_id: Optional[str] = Query(None),
    partner_id: Optional[str] = Query(None),
):
    settings = get_settings()
    report = _build_report(start, end, category, status, seller_id, partner_id, settings.display_timezone)

    try:
        csv_content = generate_report_csv(report, settings.display_timezone)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    filename = f"relatorio_vendas_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=csv_content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
