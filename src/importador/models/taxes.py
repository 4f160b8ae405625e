from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

_ZERO = Decimal("0")


@dataclass(frozen=True)
class TaxRates:
    """Percent rates applied by the calculator.

    The defaults are a simplified placeholder policy, not a real ICMS table.
    """

    icms_internal: Decimal = Decimal("18")
    icms_interstate: Decimal = Decimal("12")
    pis: Decimal = Decimal("1.65")
    cofins: Decimal = Decimal("7.6")

    def icms_rate(self, internal: bool) -> Decimal:
        return self.icms_internal if internal else self.icms_interstate

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TaxRates:
        """Create a rate table from the ``aliquotas`` YAML section, keeping defaults for missing keys."""
        default = cls()
        return cls(
            icms_internal=Decimal(str(d.get("icms_interna", default.icms_internal))),
            icms_interstate=Decimal(str(d.get("icms_interestadual", default.icms_interstate))),
            pis=Decimal(str(d.get("pis", default.pis))),
            cofins=Decimal(str(d.get("cofins", default.cofins))),
        )


DEFAULT_TAX_RATES = TaxRates()


@dataclass(frozen=True)
class TaxBreakdown:
    icms_rate: Decimal
    icms_value: Decimal
    pis_rate: Decimal
    pis_value: Decimal
    cofins_rate: Decimal
    cofins_value: Decimal

    @classmethod
    def zero(cls) -> TaxBreakdown:
        return cls(_ZERO, _ZERO, _ZERO, _ZERO, _ZERO, _ZERO)

    @property
    def total(self) -> Decimal:
        return self.icms_value + self.pis_value + self.cofins_value
