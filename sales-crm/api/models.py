"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.loyalty import LoyaltyAlert
from domain.metrics import MetricsSnapshot
from services.report_service import SalesReport


# ============================================================================
# Dashboard Models
# ============================================================================

class MonthlyBucketResponse(BaseModel):
    """Sales created in one calendar month."""
    year: int
    month: int
    label: str
    sales: int
    value: Decimal
    commission: Decimal


class YearOverYearResponse(BaseModel):
    """One month of the year-over-year chart."""
    month: int
    label: str
    current_year: int
    previous_year: int


class MetricsResponse(BaseModel):
    """Dashboard metrics snapshot."""
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
    monthly: List[MonthlyBucketResponse]
    year_over_year: List[YearOverYearResponse]
    by_category: Dict[str, int]
    by_status: Dict[str, int]

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> "MetricsResponse":
        return cls(
            generated_at=snapshot.generated_at,
            total_sales=snapshot.total_sales,
            active_sales=snapshot.active_sales,
            pending_sales=snapshot.pending_sales,
            total_value=snapshot.total_value,
            total_commission=snapshot.total_commission,
            total_mensalidades=snapshot.total_mensalidades,
            sales_this_month=snapshot.sales_this_month,
            sales_same_month_last_year=snapshot.sales_same_month_last_year,
            sales_change=snapshot.sales_change,
            commission_this_month=snapshot.commission_this_month,
            commission_same_month_last_year=snapshot.commission_same_month_last_year,
            commission_change=snapshot.commission_change,
            monthly_revenue=snapshot.monthly_revenue,
            monthly=[
                MonthlyBucketResponse(
                    year=bucket.year,
                    month=bucket.month,
                    label=bucket.label,
                    sales=bucket.sales,
                    value=bucket.value,
                    commission=bucket.commission,
                )
                for bucket in snapshot.monthly
            ],
            year_over_year=[
                YearOverYearResponse(
                    month=point.month,
                    label=point.label,
                    current_year=point.current_year,
                    previous_year=point.previous_year,
                )
                for point in snapshot.year_over_year
            ],
            by_category={category.value: count for category, count in snapshot.by_category.items()},
            by_status={status.value: count for status, count in snapshot.by_status.items()},
        )


class LoyaltyAlertResponse(BaseModel):
    """A contract due for a loyalty review."""
    sale_id: str
    client_name: str
    partner_name: Optional[str] = None
    category: str
    days_until_end: Optional[int] = None
    loyalty_end_date: Optional[date] = None

    @classmethod
    def from_alert(cls, alert: LoyaltyAlert) -> "LoyaltyAlertResponse":
        return cls(
            sale_id=alert.sale_id,
            client_name=alert.client_name,
            partner_name=alert.partner_name,
            category=alert.category.value,
            days_until_end=alert.days_until_end,
            loyalty_end_date=alert.loyalty_end_date,
        )


class DashboardResponse(BaseModel):
    """Dashboard payload: metrics plus a short alert preview."""
    metrics: MetricsResponse
    alerts: List[LoyaltyAlertResponse]
    total_alerts: int


class LoyaltyAlertListResponse(BaseModel):
    """Loyalty alerts in scan order."""
    alerts: List[LoyaltyAlertResponse]
    total_count: int


class SaleLoyaltyResponse(BaseModel):
    """Loyalty countdown for a single sale."""
    sale_id: str
    status: str
    loyalty_end_date: Optional[date] = None
    days_until_end: Optional[int] = None
    show_banner: bool

    class Config:
        json_schema_extra = {
            "example": {
                "sale_id": "5f1c7a52-8a4b-4c39-9d8e-1f0a7c2b9e11",
                "status": "ativo",
                "loyalty_end_date": "2025-09-30",
                "days_until_end": 120,
                "show_banner": True
            }
        }


# ============================================================================
# Report Models
# ============================================================================

class ReportSaleResponse(BaseModel):
    """Single sale row in a report."""
    id: str
    client_name: str
    client_nif: Optional[str] = None
    category: str
    sale_type: Optional[str] = None
    status: str
    partner_name: Optional[str] = None
    seller_name: Optional[str] = None
    contract_value: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    created_at: datetime


class ReportResponse(BaseModel):
    """Filtered sales report with totals."""
    sales: List[ReportSaleResponse]
    total_sales: int
    total_value: Decimal
    total_commission: Decimal
    by_category: Dict[str, int]
    by_status: Dict[str, int]

    @classmethod
    def from_report(cls, report: SalesReport) -> "ReportResponse":
        return cls(
            sales=[
                ReportSaleResponse(
                    id=sale.id,
                    client_name=sale.client_name,
                    client_nif=sale.client_nif,
                    category=sale.category.value,
                    sale_type=sale.sale_type.value if sale.sale_type is not None else None,
                    status=sale.status.value,
                    partner_name=sale.partner_name,
                    seller_name=sale.seller_name,
                    contract_value=sale.contract_value,
                    commission=sale.commission,
                    created_at=sale.require_created_at(),
                )
                for sale in report.sales
            ],
            total_sales=report.total_sales,
            total_value=report.total_value,
            total_commission=report.total_commission,
            by_category={category.value: count for category, count in report.by_category.items()},
            by_status={status.value: count for status, count in report.by_status.items()},
        )


# ============================================================================
# Password Models
# ============================================================================

class GeneratePasswordRequest(BaseModel):
    """Request to generate a policy-compliant password."""
    length: int = Field(12, ge=8, le=128, description="Password length")


class GeneratePasswordResponse(BaseModel):
    password: str


class ValidatePasswordRequest(BaseModel):
    password: str


class ValidatePasswordResponse(BaseModel):
    """`error` holds the first rule the password breaks, or null when valid."""
    valid: bool
    error: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "valid": False,
                "error": "Password must be at least 8 characters"
            }
        }
