"""
Tests for analytics configuration loading.

Covers:
- Packaged defaults and their checksum
- PARKS_CONFIG_TRACE audit log
- Override files and validation failures
"""

from decimal import Decimal

import pytest

from parks_config import DEFAULT_CONFIG_PATH, get_active_config
from parks_config.loader import compute_checksum, load_yaml_file, parse_config
from parks_engines.projection import Scenario
from parks_kernel.exceptions import InvalidConfigError


def _write(tmp_path, text, name="analytics.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


class TestDefaults:

    def test_packaged_defaults(self, analytics_config):
        assert analytics_config.config_id == "parks-analytics-defaults"
        assert analytics_config.version == 1
        assert analytics_config.projection.default_horizon_years == 3
        assert analytics_config.projection.default_inflation_rate_pct == Decimal("3.5")
        assert analytics_config.projection.growth_table() == {
            Scenario.OPTIMISTIC: Decimal("15"),
            Scenario.REALISTIC: Decimal("8"),
            Scenario.PESSIMISTIC: Decimal("-5"),
        }
        assert analytics_config.thresholds.tight_margin_below == Decimal("5")
        assert analytics_config.thresholds.healthy_at_least == Decimal("10")

    def test_checksum_is_deterministic(self):
        data = load_yaml_file(DEFAULT_CONFIG_PATH)
        assert get_active_config().checksum == compute_checksum(data)
        assert len(get_active_config().checksum) == 64

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_emits_config_trace(self, captured_logs):
        config = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "PARKS_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_id"] == config.config_id
        assert traces[0]["config_version"] == 1
        assert traces[0]["checksum"] == config.checksum


class TestOverrides:

    def test_partial_override_keeps_other_defaults(self, tmp_path):
        path = _write(tmp_path, """
config_id: alt
version: 4
projection:
  default_inflation_rate_pct: 4.25
  scenario_growth_pct:
    realistic: "6"
""")
        config = get_active_config(path)

        assert config.config_id == "alt"
        assert config.version == 4
        assert config.projection.default_inflation_rate_pct == Decimal("4.25")
        assert config.projection.growth_table()[Scenario.REALISTIC] == Decimal("6")
        assert config.projection.growth_table()[Scenario.OPTIMISTIC] == Decimal("15")
        assert config.thresholds.deficit_below == Decimal("0")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "config_id: [unclosed\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            get_active_config(path)
        assert exc_info.value.code == "INVALID_CONFIG"
        assert exc_info.value.source == str(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        with pytest.raises(InvalidConfigError):
            load_yaml_file(_write(tmp_path, "- one\n- two\n"))

    def test_empty_file_has_no_config_id(self, tmp_path):
        with pytest.raises(InvalidConfigError, match="config_id"):
            get_active_config(_write(tmp_path, ""))


class TestValidation:

    def test_unknown_scenario(self):
        with pytest.raises(InvalidConfigError, match="unknown scenario"):
            parse_config({
                "config_id": "x",
                "projection": {"scenario_growth_pct": {"catastrophic": "-50"}},
            })

    def test_non_numeric_rate(self):
        with pytest.raises(InvalidConfigError, match="default_inflation_rate_pct"):
            parse_config({
                "config_id": "x",
                "projection": {"default_inflation_rate_pct": "lots"},
            })

    def test_negative_horizon(self):
        with pytest.raises(InvalidConfigError):
            parse_config({"config_id": "x", "projection": {"default_horizon_years": -1}})

    def test_version_must_be_integer(self):
        with pytest.raises(InvalidConfigError, match="version"):
            parse_config({"config_id": "x", "version": "two"})

    def test_misordered_thresholds(self):
        with pytest.raises(InvalidConfigError):
            parse_config({
                "config_id": "x",
                "recommendations": {"tight_margin_below": "20", "healthy_at_least": "10"},
            })

    def test_sections_must_be_mappings(self):
        with pytest.raises(InvalidConfigError):
            parse_config({"config_id": "x", "projection": ["not", "a", "mapping"]})
