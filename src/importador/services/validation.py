from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import asdict
from decimal import Decimal
from enum import Enum
from typing import Any

from importador.models.record import CanonicalRecord, TransactionType
from importador.models.validation import ConditionalRule, ValidationReport, ValidationSettings
from importador.utils.validators import is_valid_state, to_decimal

logger = logging.getLogger(__name__)

INTERNAL_CFOP_PREFIX = "5"
INTERSTATE_CFOP_PREFIX = "6"

DEFAULT_SETTINGS = ValidationSettings()


def _field_text(data: Mapping[str, Any], name: str) -> str:
    v = data.get(name)
    if not v:
        return ""
    if isinstance(v, Enum):
        return v.value
    return str(v)


def _condition_met(rule: ConditionalRule, actual: str) -> bool:
    if rule.condition_operator == "equals":
        return actual == rule.condition_value
    if rule.condition_operator == "not_equals":
        return actual != rule.condition_value
    return rule.condition_value in actual


def _rule_fails(rule: ConditionalRule, target: str) -> bool:
    if rule.rule_type == "mandatory":
        return not target
    return target != rule.rule_value


def validate_record(
    data: CanonicalRecord | Mapping[str, Any],
    settings: ValidationSettings | None = None,
    rules: Sequence[ConditionalRule] | None = None,
) -> ValidationReport:
    """Check a (possibly partial) record against the fiscal business rules.

    Every rule runs; errors block, warnings are advisory. Missing fields
    produce messages, never exceptions.
    """
    settings = settings or DEFAULT_SETTINGS
    if isinstance(data, CanonicalRecord):
        data = asdict(data)

    if data.get("validation_bypassed"):
        return ValidationReport(warnings=("Validação removida manualmente.",))
    if settings.disable_global_validation:
        return ValidationReport(warnings=("Validação global desativada.",))

    errors: list[str] = []
    warnings: list[str] = []

    origin = _field_text(data, "origin")
    destination = _field_text(data, "destination")
    cfop = _field_text(data, "cfop")
    value = to_decimal(data.get("value"))

    if not data.get("document_number"):
        errors.append("Número do CT-e é obrigatório.")
    if value is None or value <= 0:
        errors.append("Valor deve ser maior que zero.")
    if not origin:
        errors.append("Origem é obrigatória.")
    if not destination:
        errors.append("Destino é obrigatório.")

    states_target = errors if settings.block_invalid_states else warnings
    if origin and not is_valid_state(origin):
        states_target.append("Estado de origem inválido.")
    if destination and not is_valid_state(destination):
        states_target.append("Estado de destino inválido.")

    if cfop and origin and destination:
        cfop_target = errors if settings.block_invalid_cfop else warnings
        lane = f"{origin}->{destination}"
        if origin == destination:
            if not cfop.startswith(INTERNAL_CFOP_PREFIX):
                cfop_target.append(
                    f"Operação interna ({lane}) geralmente usa CFOP iniciado em {INTERNAL_CFOP_PREFIX}."
                )
        elif not cfop.startswith(INTERSTATE_CFOP_PREFIX):
            cfop_target.append(
                f"Operação interestadual ({lane}) geralmente usa CFOP iniciado em {INTERSTATE_CFOP_PREFIX}."
            )

    threshold = settings.max_value_threshold
    if threshold and (value or Decimal("0")) > threshold:
        warnings.append(f"Valor acima do limite configurado ({threshold}).")

    if settings.require_freight_id and not data.get("freight_id"):
        warnings.append("ID de Frete é requerido pela configuração.")

    if _field_text(data, "type") == TransactionType.REVENUE.value and not data.get("category"):
        warnings.append("Categoria não definida.")

    for rule in rules or ():
        if _condition_met(rule, _field_text(data, rule.condition_field)):
            if _rule_fails(rule, _field_text(data, rule.target_field)):
                errors.append(rule.error_message)

    if errors:
        logger.debug("Record invalid: %d error(s), %d warning(s)", len(errors), len(warnings))
    return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))
