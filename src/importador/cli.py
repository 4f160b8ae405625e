from __future__ import annotations

import json
import logging
import sys
from importlib.resources import files

import yaml

from importador.models.record import CanonicalRecord
from importador.models.taxes import TaxBreakdown
from importador.models.validation import ValidationReport

USAGE = "Uso: importador-fiscal ARQUIVO.xml [--json] | importador-fiscal init"

EXIT_ERROR = 1
EXIT_INVALID = 2


def _init_config() -> None:
    """Copy the bundled rules template to the user's config directory."""
    from importador.config import RULES_FILE, get_config_dir

    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    name = f"{RULES_FILE}.example"
    dest = config_dir / name
    if dest.exists():
        print(f"  já existe: {dest}")
    else:
        src = files("importador") / "templates" / name
        with src.open("rb") as f:
            dest.write_bytes(f.read())
        print(f"  criado: {dest}")

    print()
    print(f"Configuração: {config_dir}")
    print(f"Para usar: cp {dest} {config_dir / RULES_FILE}")


def _print_summary(record: CanonicalRecord, taxes: TaxBreakdown, report: ValidationReport) -> None:
    from importador.utils.formatters import format_brl, format_percent

    kind = record.source.value.upper() if record.source else "?"
    print(f"Documento: {record.document_number} ({kind})")
    print(f"Data:      {record.date}")
    print(f"Valor:     {format_brl(record.value)}")
    if record.origin or record.destination:
        print(f"Trajeto:   {record.origin or '-'} -> {record.destination or '-'}")
    print(f"Descrição: {record.description}")
    print(f"Categoria: {record.category or '-'}")
    print()
    print(f"ICMS   {format_percent(taxes.icms_rate):>7}  {format_brl(taxes.icms_value)}")
    print(f"PIS    {format_percent(taxes.pis_rate):>7}  {format_brl(taxes.pis_value)}")
    print(f"COFINS {format_percent(taxes.cofins_rate):>7}  {format_brl(taxes.cofins_value)}")
    print()
    for msg in report.errors:
        print(f"  ERRO: {msg}")
    for msg in report.warnings:
        print(f"  AVISO: {msg}")
    print("Documento válido." if report.is_valid else "Documento inválido.")


def _import_file(path: str, as_json: bool = False) -> int:
    """Extract, tax and validate one file. Returns the process exit status."""
    from importador import config
    from importador.services.exceptions import ExtractionError
    from importador.services.parser import parse_fiscal_file
    from importador.services.taxes import calculate_taxes
    from importador.services.validation import validate_record

    try:
        record = parse_fiscal_file(path)
    except (ExtractionError, OSError) as e:
        print(f"Erro: {e}")
        return EXIT_ERROR

    try:
        rules = config.load_rules()
        rates = config.load_tax_rates(rules)
        settings = config.load_validation_settings(rules)
        conditional = config.load_conditional_rules(rules)
    except (
        yaml.YAMLError, OSError, AttributeError, KeyError, TypeError, ValueError, ArithmeticError
    ) as e:
        print(f"Erro: configuração inválida em {config.RULES_FILE} — {e}")
        return EXIT_ERROR

    taxes = calculate_taxes(record.value, record.origin, record.destination, rates)
    record = record.with_taxes(taxes)
    report = validate_record(record, settings, conditional)

    if as_json:
        payload = {
            "record": record.to_dict(),
            "taxes": {k: f"{v:.2f}" for k, v in vars(taxes).items()},
            "validation": {
                "is_valid": report.is_valid,
                "errors": list(report.errors),
                "warnings": list(report.warnings),
            },
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_summary(record, taxes, report)

    return 0 if report.is_valid else EXIT_INVALID


def main() -> None:
    """Entry point for the importador-fiscal CLI."""
    from importador.config import get_log_level

    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    args = sys.argv[1:]
    if not args:
        print(USAGE)
        sys.exit(EXIT_ERROR)

    if args[0] == "init":
        _init_config()
        return

    as_json = "--json" in args
    paths = [a for a in args if a != "--json"]
    if len(paths) != 1:
        print(USAGE)
        sys.exit(EXIT_ERROR)

    status = _import_file(paths[0], as_json=as_json)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
