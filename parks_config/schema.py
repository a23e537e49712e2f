"""
AnalyticsConfig schema.

The frozen runtime artifact produced from ``defaults.yaml`` (or an override
file) by ``parks_config.loader.parse_config``.  Engines never see this type;
services translate it into engine inputs (``ProjectionEngine`` growth table,
``AnalyticsThresholds``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from parks_engines.budget_analytics import AnalyticsThresholds
from parks_engines.projection import DEFAULT_SCENARIO_GROWTH_PCT, Scenario


@dataclass(frozen=True)
class ProjectionDefaults:
    """Projection horizon, inflation and the scenario growth table."""

    default_horizon_years: int = 3
    default_inflation_rate_pct: Decimal = Decimal("3.5")
    scenario_growth_pct: tuple[tuple[Scenario, Decimal], ...] = tuple(
        DEFAULT_SCENARIO_GROWTH_PCT.items()
    )

    def growth_table(self) -> dict[Scenario, Decimal]:
        return dict(self.scenario_growth_pct)


@dataclass(frozen=True)
class AnalyticsConfig:
    """Complete analytics configuration with its source checksum."""

    config_id: str
    version: int
    projection: ProjectionDefaults = field(default_factory=ProjectionDefaults)
    thresholds: AnalyticsThresholds = field(default_factory=AnalyticsThresholds)
    checksum: str = ""
