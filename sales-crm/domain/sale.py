"""
Domain: Sale records.

A SaleRecord is one contract sold to a client: an energy, telecom or solar
panel contract moving through the pipeline from negotiation to active (or
lost/cancelled). Records are supplied by the store and are read-only here.

Rules captured in this module:
- `created_at` is a UTC timestamp and drives monthly/yearly bucketing.
- `active_date` and `loyalty_end_date` are calendar dates.
- A `refid` sale renews a previous contract of the same client.
- Missing monetary values count as zero when summed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .errors import DataIntegrityError
from .time import require_utc_timestamp


class SaleCategory(str, Enum):
    ENERGIA = "energia"
    TELECOMUNICACOES = "telecomunicacoes"
    PAINEIS_SOLARES = "paineis_solares"


class SaleType(str, Enum):
    NOVA_INSTALACAO = "nova_instalacao"
    REFID = "refid"


class SaleStatus(str, Enum):
    EM_NEGOCIACAO = "em_negociacao"
    PENDENTE = "pendente"
    ATIVO = "ativo"
    PERDIDO = "perdido"
    ANULADO = "anulado"


ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable sale record as fetched from the store.

    `created_at` may be None only because the store can hand back rows with
    missing timestamps; any aggregation over such a record fails loudly.
    """

    id: str
    client_name: str
    client_address: str
    category: SaleCategory
    status: SaleStatus
    created_at: Optional[datetime]
    contract_value: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    sale_type: Optional[SaleType] = None
    active_date: Optional[date] = None
    loyalty_end_date: Optional[date] = None
    loyalty_months: Optional[int] = None

    # Relations, denormalized for display and report filters
    partner_id: Optional[str] = None
    partner_name: Optional[str] = None
    seller_id: Optional[str] = None
    seller_name: Optional[str] = None
    client_nif: Optional[str] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        for name in ("active_date", "loyalty_end_date"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, date):
                raise DataIntegrityError(f"{name} must be a date, got {type(value).__name__}")

    @property
    def is_active(self) -> bool:
        return self.status is SaleStatus.ATIVO

    @property
    def is_renewal(self) -> bool:
        return self.sale_type is SaleType.REFID

    @property
    def value_or_zero(self) -> Decimal:
        return self.contract_value if self.contract_value is not None else ZERO

    @property
    def commission_or_zero(self) -> Decimal:
        return self.commission if self.commission is not None else ZERO

    def require_created_at(self) -> datetime:
        """Return `created_at`, raising DataIntegrityError when it is missing."""

        if self.created_at is None:
            raise DataIntegrityError(f"Sale {self.id} has no created_at")
        return self.created_at


__all__ = [
    "SaleCategory",
    "SaleRecord",
    "SaleStatus",
    "SaleType",
    "ZERO",
]
