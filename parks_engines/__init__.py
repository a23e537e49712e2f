"""
Module: parks_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    modules layer (parks_modules) and the report script.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import parks_kernel.domain, parks_kernel.exceptions and
    parks_kernel.logging_config (and sibling engine modules).
    MUST NOT import parks_modules or parks_config.

Invariants enforced:
    - Purity: engines never read the clock, the database or configuration.
      Thresholds and growth tables are passed in by the caller.
    - Decimal-only arithmetic; rounding happens only in ``to_dict``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine`` (see
    ``parks_engines.tracer``), emitting PARKS_ENGINE_TRACE log records.

Usage:
    from parks_engines import CashFlowMatrixBuilder, SummaryAggregator
    from parks_engines import ProjectionEngine, Scenario
    from parks_engines import BudgetAnalytics
"""

from parks_kernel.logging_config import get_logger

logger = get_logger("engines")

from parks_engines.budget_analytics import (
    AnalyticsThresholds,
    BudgetAnalysis,
    BudgetAnalytics,
    CategoryShare,
    Recommendation,
    Severity,
    income_to_expense_ratio,
    profit_margin,
)
from parks_engines.cashflow_matrix import (
    CashFlowCell,
    CashFlowMatrix,
    CashFlowMatrixBuilder,
    CategoryCashFlow,
)
from parks_engines.projection import (
    DEFAULT_HORIZON_YEARS,
    DEFAULT_SCENARIO_GROWTH_PCT,
    Projection,
    ProjectionEngine,
    Scenario,
)
from parks_engines.summary import (
    AnnualSummary,
    CashFlowSummary,
    MonthlySeries,
    SeriesSummary,
    SummaryAggregator,
    VarianceSummary,
    execution_ratio,
)
from parks_engines.tracer import compute_input_fingerprint, traced_engine
from parks_engines.variance import (
    VarianceBranch,
    classify,
    net_variance_percent,
    variance_percent,
)

__all__ = [
    # Budget analytics
    "AnalyticsThresholds",
    "BudgetAnalysis",
    "BudgetAnalytics",
    "CategoryShare",
    "Recommendation",
    "Severity",
    "income_to_expense_ratio",
    "profit_margin",
    # Cash-flow matrix
    "CashFlowCell",
    "CashFlowMatrix",
    "CashFlowMatrixBuilder",
    "CategoryCashFlow",
    # Projection
    "DEFAULT_HORIZON_YEARS",
    "DEFAULT_SCENARIO_GROWTH_PCT",
    "Projection",
    "ProjectionEngine",
    "Scenario",
    # Summary
    "AnnualSummary",
    "CashFlowSummary",
    "MonthlySeries",
    "SeriesSummary",
    "SummaryAggregator",
    "VarianceSummary",
    "execution_ratio",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
    # Variance
    "VarianceBranch",
    "classify",
    "net_variance_percent",
    "variance_percent",
]
