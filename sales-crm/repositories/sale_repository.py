"""
Sale repository (read-only persistence access).

This module only fetches sale rows and maps them to SaleRecord domain
entities. It does not aggregate; metrics and alerts live in `domain/`.
Rows that cannot be mapped raise DataIntegrityError instead of being skipped,
so totals computed downstream are never silently wrong.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from domain.errors import DataIntegrityError
from domain.sale import SaleCategory, SaleRecord, SaleStatus, SaleType
from repositories.client import get_supabase

# Supabase table name for sale records.
# Keep this aligned with your database schema.
_SALES_TABLE: str = "sales"

# Partner name comes from the partners relation.
_SALES_SELECT: str = "*, partners(name)"


def _parse_utc_datetime(value: Any, *, name: str) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    Naive values are taken as UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise DataIntegrityError(f"{name} is not an ISO-8601 timestamp: {value!r}") from None
    else:
        raise DataIntegrityError(f"Unsupported {name} type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_date(value: Any, *, name: str) -> Optional[date]:
    """Parse an optional date column (`YYYY-MM-DD` or a full timestamp)."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            raise DataIntegrityError(f"{name} is not an ISO-8601 date: {value!r}") from None
    raise DataIntegrityError(f"Unsupported {name} type: {type(value)!r}")


def _parse_decimal(value: Any, *, name: str) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise DataIntegrityError(f"{name} is not a number: {value!r}") from None


def _parse_int(value: Any, *, name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise DataIntegrityError(f"{name} is not an integer: {value!r}")
    try:
        return int(str(value))
    except ValueError:
        raise DataIntegrityError(f"{name} is not an integer: {value!r}") from None


def _parse_enum(enum_type: Any, value: Any, *, name: str) -> Any:
    try:
        return enum_type(str(value))
    except ValueError:
        raise DataIntegrityError(f"Unknown {name}: {value!r}") from None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _partner_name(row: Mapping[str, Any]) -> Optional[str]:
    partner = row.get("partners")
    if isinstance(partner, Mapping):
        return _optional_str(partner.get("name"))
    return _optional_str(row.get("partner_name"))


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """Convert a Supabase row into a SaleRecord."""

    sale_id = row.get("id")
    if sale_id is None or sale_id == "":
        raise DataIntegrityError("Sale row has no id")

    sale_type = row.get("sale_type")
    created_at = row.get("created_at")
    if created_at is None:
        raise DataIntegrityError(f"Sale {sale_id} has no created_at")

    return SaleRecord(
        id=str(sale_id),
        client_name=str(row.get("client_name") or ""),
        client_address=str(row.get("client_address") or ""),
        category=_parse_enum(SaleCategory, row.get("category"), name="category"),
        status=_parse_enum(SaleStatus, row.get("status"), name="status"),
        created_at=_parse_utc_datetime(created_at, name="created_at"),
        contract_value=_parse_decimal(row.get("contract_value"), name="contract_value"),
        commission=_parse_decimal(row.get("commission"), name="commission"),
        sale_type=_parse_enum(SaleType, sale_type, name="sale_type") if sale_type else None,
        active_date=_parse_date(row.get("active_date"), name="active_date"),
        loyalty_end_date=_parse_date(row.get("loyalty_end_date"), name="loyalty_end_date"),
        loyalty_months=_parse_int(row.get("loyalty_months"), name="loyalty_months"),
        partner_id=_optional_str(row.get("partner_id")),
        partner_name=_partner_name(row),
        seller_id=_optional_str(row.get("seller_id")),
        seller_name=_optional_str(row.get("seller_name")),
        client_nif=_optional_str(row.get("client_nif")),
    )


def _rows(response: Any, action: str) -> List[Mapping[str, Any]]:
    error = getattr(response, "error", None)
    if error:
        raise RuntimeError(f"Failed to {action}: {error}")
    return getattr(response, "data", None) or []


def list_sales(client: Any = None) -> List[SaleRecord]:
    """
    Retrieve every sale, newest first.

    Returns:
        List[SaleRecord] (possibly empty)
    """

    db = client or get_supabase()
    response = (
        db.table(_SALES_TABLE)
        .select(_SALES_SELECT)
        .order("created_at", desc=True)
        .execute()
    )
    return [_row_to_sale(row) for row in _rows(response, "list sales")]


def list_sales_by_partner(partner_id: str, client: Any = None) -> List[SaleRecord]:
    """
    Retrieve all sales brought in by a partner (reseller).

    Args:
        partner_id: Partner identifier

    Returns:
        List[SaleRecord] (possibly empty)
    """

    db = client or get_supabase()
    response = (
        db.table(_SALES_TABLE)
        .select(_SALES_SELECT)
        .eq("partner_id", partner_id)
        .execute()
    )
    return [_row_to_sale(row) for row in _rows(response, "list partner sales")]


def get_sale_by_id(sale_id: str, client: Any = None) -> Optional[SaleRecord]:
    """
    Retrieve a single sale by its ID.

    Returns:
        SaleRecord or None if not found
    """

    db = client or get_supabase()
    response = (
        db.table(_SALES_TABLE)
        .select(_SALES_SELECT)
        .eq("id", sale_id)
        .limit(1)
        .execute()
    )
    rows = _rows(response, "get sale")

    if not rows:
        return None

    return _row_to_sale(rows[0])


__all__ = [
    "get_sale_by_id",
    "list_sales",
    "list_sales_by_partner",
]
