from __future__ import annotations

from decimal import Decimal

import pytest
import yaml

import importador.config as config_mod
from importador.models.taxes import DEFAULT_TAX_RATES


class TestGetConfigDir:
    def test_from_env_var(self, monkeypatch, tmp_path):
        monkeypatch.setenv("IMPORTADOR_CONFIG_DIR", str(tmp_path))
        assert config_mod.get_config_dir() == tmp_path

    def test_project_root_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("IMPORTADOR_CONFIG_DIR", raising=False)
        fake_pkg = tmp_path / "src" / "importador"
        fake_pkg.mkdir(parents=True)
        (tmp_path / "config").mkdir()
        monkeypatch.setattr(config_mod, "__file__", str(fake_pkg / "config.py"))
        assert config_mod.get_config_dir() == tmp_path / "config"

    def test_platformdirs_fallback(self, monkeypatch, tmp_path):
        monkeypatch.delenv("IMPORTADOR_CONFIG_DIR", raising=False)
        fake_pkg = tmp_path / "nowhere" / "src" / "importador"
        fake_pkg.mkdir(parents=True)
        monkeypatch.setattr(config_mod, "__file__", str(fake_pkg / "config.py"))
        assert "importador-fiscal" in str(config_mod.get_config_dir())


class TestLogLevel:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("IMPORTADOR_LOG_LEVEL", raising=False)
        assert config_mod.get_log_level() == "WARNING"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("IMPORTADOR_LOG_LEVEL", "debug")
        assert config_mod.get_log_level() == "DEBUG"


class TestLoadRules:
    def test_missing_file(self, empty_config_dir):
        assert config_mod.load_rules() == {}

    def test_empty_file(self, empty_config_dir):
        (empty_config_dir / "regras.yaml").write_text("")
        assert config_mod.load_rules() == {}

    def test_reads_file(self, empty_config_dir):
        (empty_config_dir / "regras.yaml").write_text(
            yaml.dump({"aliquotas": {"icms_interna": 17}})
        )
        assert config_mod.load_rules() == {"aliquotas": {"icms_interna": 17}}

    def test_non_mapping_rejected(self, empty_config_dir):
        (empty_config_dir / "regras.yaml").write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapeamento"):
            config_mod.load_rules()

    def test_bundled_template_is_valid(self, empty_config_dir):
        from importlib.resources import files

        template = files("importador") / "templates" / "regras.yaml.example"
        (empty_config_dir / "regras.yaml").write_text(template.read_text(encoding="utf-8"))
        rules = config_mod.load_rules()
        assert config_mod.load_tax_rates(rules) == DEFAULT_TAX_RATES
        assert config_mod.load_validation_settings(rules).block_invalid_states is True
        assert config_mod.load_conditional_rules(rules) == []


class TestSections:
    def test_tax_rates_default(self):
        assert config_mod.load_tax_rates({}) is DEFAULT_TAX_RATES

    def test_tax_rates_from_rules(self):
        rates = config_mod.load_tax_rates({"aliquotas": {"icms_interestadual": 7}})
        assert rates.icms_interstate == Decimal("7")
        assert rates.icms_internal == Decimal("18")

    def test_tax_rates_reads_config_dir(self, empty_config_dir):
        (empty_config_dir / "regras.yaml").write_text(yaml.dump({"aliquotas": {"pis": 0.65}}))
        assert config_mod.load_tax_rates().pis == Decimal("0.65")

    def test_validation_settings(self):
        s = config_mod.load_validation_settings({"validacao": {"bloquear_cfop_invalido": True}})
        assert s.block_invalid_cfop is True

    def test_validation_settings_missing_section(self):
        assert config_mod.load_validation_settings({"validacao": None}).block_invalid_states

    def test_conditional_rules(self):
        rules = config_mod.load_conditional_rules({
            "regras_condicionais": [
                {"campo_condicao": "origin", "valor_condicao": "SP",
                 "campo_alvo": "freight_id", "mensagem": "ID obrigatório"},
            ]
        })
        assert len(rules) == 1
        assert rules[0].error_message == "ID obrigatório"

    def test_conditional_rules_invalid(self):
        with pytest.raises(ValueError):
            config_mod.load_conditional_rules({
                "regras_condicionais": [
                    {"campo_condicao": "origin", "operador": "regex",
                     "campo_alvo": "cfop", "mensagem": "m"},
                ]
            })
