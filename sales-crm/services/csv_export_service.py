"""
CSV export service for sales reports.

Produces the spreadsheet-friendly export of a SalesReport:
- Semicolon-separated, every cell quoted, UTF-8 BOM so Excel detects encoding
- Portuguese headers and labels for category/status codes
- Dates as dd/mm/yyyy in the display timezone

Security:
- CSV Injection Prevention: free-text cells are stripped of leading formula characters
- Security Logging: every stripped value is logged as a warning
"""

from __future__ import annotations

import csv
import logging
from decimal import Decimal
from io import StringIO
from typing import List, Optional
from zoneinfo import ZoneInfo

from domain.sale import SaleCategory, SaleRecord, SaleStatus
from domain.time import DEFAULT_DISPLAY_TIMEZONE
from services.report_service import SalesReport

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"

CATEGORY_LABELS = {
    SaleCategory.ENERGIA: "Energia",
    SaleCategory.TELECOMUNICACOES: "Telecomunicações",
    SaleCategory.PAINEIS_SOLARES: "Painéis Solares",
}

STATUS_LABELS = {
    SaleStatus.EM_NEGOCIACAO: "Em Negociação",
    SaleStatus.PENDENTE: "Pendente",
    SaleStatus.ATIVO: "Ativo",
    SaleStatus.PERDIDO: "Perdido",
    SaleStatus.ANULADO: "Anulado",
}

REPORT_HEADERS = [
    "Cliente",
    "NIF",
    "Categoria",
    "Tipo",
    "Parceiro",
    "Valor Contrato",
    "Comissão",
    "Estado",
    "Vendedor",
    "Data",
]


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Sanitize a free-text cell so spreadsheets do not evaluate it as a formula.

    Leading =, +, -, @, tab and carriage return are stripped. When anything is
    stripped a warning is logged with the field name and both values.

    Example:
        sanitize_csv_field("=HYPERLINK(...)", "client_name")
        # Returns "HYPERLINK(...)" and logs a warning
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    original_text = text
    dangerous_chars = {'=', '+', '-', '@', '\t', '\r'}

    stripped_chars = []
    while text and text[0] in dangerous_chars:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"CSV injection character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention"
            }
        )

    return text


def _format_amount(value: Optional[Decimal]) -> str:
    return "" if value is None else str(value)


def sale_to_csv_row(sale: SaleRecord, tz: ZoneInfo) -> List[str]:
    """Convert one sale into the export columns (see REPORT_HEADERS)."""

    created_at = sale.require_created_at().astimezone(tz)
    return [
        sanitize_csv_field(sale.client_name, "client_name"),
        sanitize_csv_field(sale.client_nif, "client_nif"),
        CATEGORY_LABELS.get(sale.category, sale.category.value),
        sale.sale_type.value if sale.sale_type is not None else "",
        sanitize_csv_field(sale.partner_name, "partner_name"),
        _format_amount(sale.value_or_zero),
        _format_amount(sale.commission),
        STATUS_LABELS.get(sale.status, sale.status.value),
        sanitize_csv_field(sale.seller_name, "seller_name"),
        created_at.strftime("%d/%m/%Y"),
    ]


def generate_report_csv(report: SalesReport, tz: Optional[ZoneInfo] = None) -> str:
    """
    Render a SalesReport as CSV text.

    Raises:
        ValueError: If the report has no sales to export
    """
    if not report.sales:
        raise ValueError("no data to export")

    zone = tz if tz is not None else ZoneInfo(DEFAULT_DISPLAY_TIMEZONE)

    output = StringIO()
    writer = csv.writer(output, delimiter=";", quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(REPORT_HEADERS)
    for sale in report.sales:
        writer.writerow(sale_to_csv_row(sale, zone))

    logger.info("Report exported to CSV", extra={"rows": len(report.sales)})
    return UTF8_BOM + output.getvalue()


__all__ = [
    "CATEGORY_LABELS",
    "REPORT_HEADERS",
    "STATUS_LABELS",
    "generate_report_csv",
    "sale_to_csv_row",
    "sanitize_csv_field",
]
