"""Tests for KernelConfig and ReportingConfig loading."""

from pathlib import Path

import pytest
import yaml

from ledger_kernel.config import KernelConfig, load_yaml_file
from ledger_reporting.config import ReportingConfig


def _write(tmp_path, text: str, name: str = "ledger.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


class TestKernelConfigDefaults:
    def test_defaults(self):
        config = KernelConfig.with_defaults()

        assert config.database_url.startswith("sqlite")
        assert config.is_sqlite is True
        assert config.statement_timeout_ms == 30_000
        assert config.voucher_sequence_width == 6
        assert config.money_decimal_places == 2

    def test_frozen(self):
        config = KernelConfig()
        with pytest.raises(AttributeError):
            config.pool_size = 99


class TestKernelConfigValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"database_url": ""},
            {"pool_size": 0},
            {"max_overflow": -1},
            {"statement_timeout_ms": -5},
            {"log_level": "LOUD"},
            {"voucher_sequence_width": 0},
            {"voucher_sequence_width": 13},
            {"money_decimal_places": 7},
        ],
    )
    def test_out_of_range_values_rejected(self, overrides):
        with pytest.raises(ValueError):
            KernelConfig(**overrides)

    def test_log_level_case_insensitive(self):
        assert KernelConfig(log_level="debug").log_level == "debug"

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="pool_sise"):
            KernelConfig.from_dict({"pool_sise": 5})


class TestKernelConfigYaml:
    def test_kernel_section(self, tmp_path):
        path = _write(tmp_path, """
kernel:
  database_url: postgresql+psycopg2://ledger@db/ledger
  pool_size: 4
  statement_timeout_ms: 1000
reporting:
  entity_name: Acme
""")
        config = KernelConfig.from_yaml(path)

        assert config.database_url == "postgresql+psycopg2://ledger@db/ledger"
        assert config.is_sqlite is False
        assert config.pool_size == 4
        assert config.statement_timeout_ms == 1000

    def test_top_level_settings(self, tmp_path):
        path = _write(tmp_path, "voucher_sequence_width: 8\nreporting:\n  entity_name: Acme\n")
        assert KernelConfig.from_yaml(path).voucher_sequence_width == 8

    def test_empty_file_gives_defaults(self, tmp_path):
        assert KernelConfig.from_yaml(_write(tmp_path, "")) == KernelConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            KernelConfig.from_yaml(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_yaml_file(_write(tmp_path, "kernel: [unclosed"))

    def test_non_mapping_document(self, tmp_path):
        with pytest.raises(ValueError):
            load_yaml_file(_write(tmp_path, "- one\n- two\n"))


class TestKernelConfigEnv:
    def test_empty_environment(self):
        assert KernelConfig.from_env({}) == KernelConfig()

    def test_database_url_precedence(self):
        config = KernelConfig.from_env({
            "LEDGER_DATABASE_URL": "postgresql+psycopg2://ledger@primary/ledger",
            "DATABASE_URL": "postgresql+psycopg2://ledger@fallback/ledger",
        })
        assert config.database_url == "postgresql+psycopg2://ledger@primary/ledger"

    def test_generic_database_url(self):
        config = KernelConfig.from_env({"DATABASE_URL": "postgresql+psycopg2://ledger@db/ledger"})
        assert config.database_url == "postgresql+psycopg2://ledger@db/ledger"

    def test_env_url_overrides_file(self, tmp_path):
        path = _write(tmp_path, "kernel:\n  database_url: sqlite:///file.db\n  pool_size: 3\n")
        config = KernelConfig.from_env({
            "LEDGER_CONFIG": str(path),
            "LEDGER_DATABASE_URL": "postgresql+psycopg2://ledger@db/ledger",
        })

        assert config.database_url == "postgresql+psycopg2://ledger@db/ledger"
        assert config.pool_size == 3


class TestReportingConfig:
    def test_defaults(self):
        config = ReportingConfig.with_defaults()

        assert config.retained_earnings_code == "RE"
        assert config.retained_earnings_label == "Net Income (Retained Earnings)"
        assert config.include_zero_balances is False
        assert config.validate_hierarchy is True

    def test_blank_labels_rejected(self):
        with pytest.raises(ValueError):
            ReportingConfig(retained_earnings_code="")
        with pytest.raises(ValueError):
            ReportingConfig(retained_earnings_label="")

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError):
            ReportingConfig.from_dict({"currency": "USD"})

    def test_from_yaml_reads_reporting_section(self, tmp_path):
        path = _write(tmp_path, """
kernel:
  pool_size: 4
reporting:
  entity_name: Acme Traders
  include_zero_balances: true
""")
        config = ReportingConfig.from_yaml(path)

        assert config.entity_name == "Acme Traders"
        assert config.include_zero_balances is True

    def test_from_yaml_without_section(self, tmp_path):
        assert ReportingConfig.from_yaml(_write(tmp_path, "kernel: {}\n")) == ReportingConfig()

    def test_example_file_loads(self):
        example = Path(__file__).parent.parent / "config" / "ledger.example.yaml"
        assert KernelConfig.from_yaml(example).voucher_sequence_width == 6
        assert ReportingConfig.from_yaml(example).retained_earnings_code
