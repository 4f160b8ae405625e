from __future__ import annotations

import logging
import os
from datetime import timedelta, timezone
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

from importador.models.taxes import DEFAULT_TAX_RATES, TaxRates
from importador.models.validation import ConditionalRule, ValidationSettings

logger = logging.getLogger(__name__)

APP_NAME = "importador-fiscal"
RULES_FILE = "regras.yaml"


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Resolve config dir for .env loading without depending on env vars from .env itself.

    Returns None if only platformdirs would resolve and that dir does not exist.
    """
    from_env = os.environ.get("IMPORTADOR_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    pd = Path(platformdirs.user_config_dir(APP_NAME))
    if pd.is_dir():
        return pd
    return None


# Load .env: cwd first (highest priority), then config dir (won't override)
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def get_config_dir() -> Path:
    """Resolve config directory. Re-evaluated on each call to pick up env changes.

    Priority: 1) IMPORTADOR_CONFIG_DIR, 2) dev repo layout, 3) platformdirs.
    """
    from_env = os.environ.get("IMPORTADOR_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    # Development layout: src/importador/config.py -> ../../.. = project root
    project_root = Path(__file__).resolve().parent.parent.parent
    candidate = project_root / "config"
    if candidate.is_dir():
        return candidate
    return Path(platformdirs.user_config_dir(APP_NAME))


def get_log_level() -> str:
    return os.environ.get("IMPORTADOR_LOG_LEVEL", "WARNING").upper()


BRT = timezone(timedelta(hours=-3))


# --- YAML rules ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict (empty for an empty file)."""
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_rules() -> dict:
    """Load regras.yaml from the config dir, or an empty dict when absent."""
    path = get_config_dir() / RULES_FILE
    if not path.is_file():
        logger.debug("No %s in %s, using defaults", RULES_FILE, path.parent)
        return {}
    logger.info("Loading rules from %s", path)
    rules = load_yaml(path)
    if not isinstance(rules, dict):
        raise ValueError(f"{RULES_FILE} deve conter um mapeamento de seções")
    return rules


def load_tax_rates(rules: dict | None = None) -> TaxRates:
    """Rate table from the ``aliquotas`` section, defaults otherwise."""
    section = (rules if rules is not None else load_rules()).get("aliquotas")
    if not section:
        return DEFAULT_TAX_RATES
    return TaxRates.from_dict(section)


def load_validation_settings(rules: dict | None = None) -> ValidationSettings:
    """Validator switches from the ``validacao`` section."""
    section = (rules if rules is not None else load_rules()).get("validacao")
    return ValidationSettings.from_dict(section or {})


def load_conditional_rules(rules: dict | None = None) -> list[ConditionalRule]:
    """Conditional rules from the ``regras_condicionais`` list."""
    section = (rules if rules is not None else load_rules()).get("regras_condicionais")
    return [ConditionalRule.from_dict(r) for r in section or []]
