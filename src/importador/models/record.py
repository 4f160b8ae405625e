from __future__ import annotations

from dataclasses import dataclass, fields, replace
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from importador.models.taxes import TaxBreakdown

_ZERO = Decimal("0")


class TransactionType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class DocumentKind(str, Enum):
    CTE = "cte"
    NFSE = "nfse"


@dataclass(frozen=True)
class CanonicalRecord:
    """Normalized transaction extracted from a single fiscal XML document.

    ``document_number`` holds the CT-e number or the NFS-e number depending
    on ``source``. Tax values stay at zero until the caller merges a
    ``TaxBreakdown`` in with ``with_taxes``.
    """

    type: TransactionType
    date: str  # YYYY-MM-DD
    value: Decimal
    document_number: str
    origin: str
    destination: str
    description: str
    icms_value: Decimal = _ZERO
    pis_value: Decimal = _ZERO
    cofins_value: Decimal = _ZERO

    source: DocumentKind | None = None
    cfop: str = ""
    category: str = ""
    access_key: str = ""
    provider_cnpj: str = ""
    provider_name: str = ""
    recipient_cnpj: str = ""
    taker_name: str = ""
    freight_id: str = ""

    def with_taxes(self, taxes: TaxBreakdown) -> CanonicalRecord:
        """Return a copy carrying the computed ICMS, PIS and COFINS values."""
        return replace(
            self,
            icms_value=taxes.icms_value,
            pis_value=taxes.pis_value,
            cofins_value=taxes.cofins_value,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON output; enums become values, Decimals two-place strings."""
        out: dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if isinstance(v, Enum):
                v = v.value
            elif isinstance(v, Decimal):
                v = f"{v:.2f}"
            out[f.name] = v
        return out
