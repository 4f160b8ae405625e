from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

CONDITION_OPERATORS = frozenset({"equals", "not_equals", "contains"})
RULE_TYPES = frozenset({"mandatory", "match_value"})


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ValidationSettings:
    """User-tunable switches for the record validator.

    Defaults block on invalid UF codes and only warn on CFOP direction.
    """

    disable_global_validation: bool = False
    block_invalid_states: bool = True
    block_invalid_cfop: bool = False
    max_value_threshold: Decimal | None = None
    require_freight_id: bool = False

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ValidationSettings:
        """Create settings from the ``validacao`` YAML section."""
        threshold = d.get("valor_maximo")
        return cls(
            disable_global_validation=bool(d.get("desativar_validacao", False)),
            block_invalid_states=bool(d.get("bloquear_estados_invalidos", True)),
            block_invalid_cfop=bool(d.get("bloquear_cfop_invalido", False)),
            max_value_threshold=Decimal(str(threshold)) if threshold is not None else None,
            require_freight_id=bool(d.get("exigir_id_frete", False)),
        )


@dataclass(frozen=True)
class ConditionalRule:
    """When ``condition_field`` satisfies the condition, ``target_field`` must pass the rule."""

    condition_field: str
    condition_operator: str  # equals | not_equals | contains
    condition_value: str
    target_field: str
    rule_type: str  # mandatory | match_value
    error_message: str
    rule_value: str = ""

    def __post_init__(self) -> None:
        if self.condition_operator not in CONDITION_OPERATORS:
            raise ValueError(f"Operador de condição inválido: '{self.condition_operator}'")
        if self.rule_type not in RULE_TYPES:
            raise ValueError(f"Tipo de regra inválido: '{self.rule_type}'")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ConditionalRule:
        return cls(
            condition_field=d["campo_condicao"],
            condition_operator=d.get("operador", "equals"),
            condition_value=str(d.get("valor_condicao", "")),
            target_field=d["campo_alvo"],
            rule_type=d.get("tipo", "mandatory"),
            error_message=d["mensagem"],
            rule_value=str(d.get("valor_regra", "")),
        )
