from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, localcontext
from typing import Any

from importador.models.taxes import DEFAULT_TAX_RATES, TaxBreakdown, TaxRates
from importador.utils.validators import to_decimal

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")


def _apply(value: Decimal, rate: Decimal) -> Decimal:
    """value * rate%, rounded half-up to cents."""
    return (value * rate / _HUNDRED).quantize(_CENTS, rounding=ROUND_HALF_UP)


def calculate_taxes(
    value: Any,
    origin: str | None,
    destination: str | None,
    rates: TaxRates = DEFAULT_TAX_RATES,
) -> TaxBreakdown:
    """Compute ICMS, PIS and COFINS for a freight lane.

    Returns the all-zero breakdown unless value, origin and destination are
    all present. ICMS uses the internal rate when origin equals destination,
    the interstate rate otherwise. Never raises.
    """
    amount = to_decimal(value)
    if not amount or not origin or not destination:
        return TaxBreakdown.zero()

    icms_rate = rates.icms_rate(origin == destination)
    with localcontext() as ctx:
        # Cents of the largest amount must fit in the working precision
        ctx.prec = max(ctx.prec, amount.adjusted() + 10)
        try:
            return TaxBreakdown(
                icms_rate=icms_rate,
                icms_value=_apply(amount, icms_rate),
                pis_rate=rates.pis,
                pis_value=_apply(amount, rates.pis),
                cofins_rate=rates.cofins,
                cofins_value=_apply(amount, rates.cofins),
            )
        except (InvalidOperation, Overflow):
            logger.warning("Amount %s out of range for tax calculation", amount)
            return TaxBreakdown.zero()
