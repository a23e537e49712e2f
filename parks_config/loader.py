"""
Configuration Loader (``parks_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``parks_config.schema.AnalyticsConfig``.  Callers obtain configuration
through ``parks_config.get_active_config()``; the functions here are the
building blocks it uses and are exposed for tests.

Invariants enforced
-------------------
* Every parse error raises ``InvalidConfigError`` naming the source and
  the offending key; no silent defaults for malformed values.  Absent
  optional sections fall back to the documented defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML or values  -> ``InvalidConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from parks_config.schema import AnalyticsConfig, ProjectionDefaults
from parks_engines.budget_analytics import AnalyticsThresholds
from parks_engines.projection import DEFAULT_SCENARIO_GROWTH_PCT, Scenario
from parks_kernel.domain.values import to_decimal
from parks_kernel.exceptions import InvalidConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        InvalidConfigError: if the file is not valid YAML or its top level
            is not a mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigError(str(path), f"invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigError(str(path), "top level must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _decimal(source: str, key: str, value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError as e:
        raise InvalidConfigError(source, f"{key}: {e}") from e


def parse_projection(data: dict[str, Any], source: str) -> ProjectionDefaults:
    """Parse the ``projection`` section."""
    horizon = data.get("default_horizon_years", 3)
    if isinstance(horizon, bool) or not isinstance(horizon, int) or horizon < 0:
        raise InvalidConfigError(
            source, f"projection.default_horizon_years must be a non-negative integer, got {horizon!r}"
        )

    growth = dict(DEFAULT_SCENARIO_GROWTH_PCT)
    for name, value in (data.get("scenario_growth_pct") or {}).items():
        try:
            scenario = Scenario(name)
        except ValueError as e:
            raise InvalidConfigError(source, f"unknown scenario {name!r}") from e
        growth[scenario] = _decimal(source, f"projection.scenario_growth_pct.{name}", value)

    return ProjectionDefaults(
        default_horizon_years=horizon,
        default_inflation_rate_pct=_decimal(
            source, "projection.default_inflation_rate_pct",
            data.get("default_inflation_rate_pct", "3.5"),
        ),
        scenario_growth_pct=tuple((s, growth[s]) for s in Scenario),
    )


def parse_thresholds(data: dict[str, Any], source: str) -> AnalyticsThresholds:
    """Parse the ``recommendations`` section."""
    defaults = AnalyticsThresholds()
    values = {
        name: _decimal(source, f"recommendations.{name}", data.get(name, getattr(defaults, name)))
        for name in ("deficit_below", "tight_margin_below", "healthy_at_least")
    }
    try:
        return AnalyticsThresholds(**values)
    except ValueError as e:
        raise InvalidConfigError(source, str(e)) from e


def parse_config(data: dict[str, Any], source: str = "<memory>") -> AnalyticsConfig:
    """
    Parse a loaded YAML mapping into an ``AnalyticsConfig``.

    Raises:
        InvalidConfigError: on a missing ``config_id`` or malformed values.
    """
    if not data.get("config_id"):
        raise InvalidConfigError(source, "config_id is required")
    projection = data.get("projection") or {}
    recommendations = data.get("recommendations") or {}
    if not isinstance(projection, dict) or not isinstance(recommendations, dict):
        raise InvalidConfigError(source, "projection and recommendations must be mappings")

    version = data.get("version", 1)
    if isinstance(version, bool) or not isinstance(version, int):
        raise InvalidConfigError(source, f"version must be an integer, got {version!r}")

    return AnalyticsConfig(
        config_id=str(data["config_id"]),
        version=version,
        projection=parse_projection(projection, source),
        thresholds=parse_thresholds(recommendations, source),
        checksum=compute_checksum(data),
    )
