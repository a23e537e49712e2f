#!/usr/bin/env python3
"""
Cash-flow report from a YAML description of categories, lines and actuals.

Runs the matrix, summary, projection and analytics engines without a
database and prints one JSON document.

Usage:
    python3 scripts/cashflow_report.py scripts/samples/municipal_2025.yaml
    python3 scripts/cashflow_report.py input.yaml --scenario optimistic --years 5
    python3 scripts/cashflow_report.py input.yaml --config my_analytics.yaml
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from parks_config import AnalyticsConfig, get_active_config, load_yaml_file
from parks_engines import (
    AnnualSummary,
    BudgetAnalytics,
    CashFlowMatrixBuilder,
    ProjectionEngine,
    Scenario,
    SummaryAggregator,
)
from parks_kernel.domain import (
    ActualEntry,
    Budget,
    BudgetLine,
    BudgetScope,
    Category,
    CategoryCatalog,
    compute_totals,
)
from parks_kernel.exceptions import ParksFinanceError
from parks_kernel.logging_config import configure_logging


def _scope(value: Any) -> BudgetScope:
    if value in (None, "municipal"):
        return BudgetScope.municipal()
    return BudgetScope.park(int(value))


def parse_input(data: dict[str, Any]) -> tuple[int, BudgetScope, CategoryCatalog, list[BudgetLine], list[ActualEntry]]:
    """Turn the YAML document into domain objects.

    Raises:
        KeyError: A required key is missing.
        ValueError: A value is malformed.
        ParksFinanceError: A line fails validation.
    """
    year = int(data["year"])
    scope = _scope(data.get("scope"))
    catalog = CategoryCatalog(
        Category(
            id=str(c["id"]),
            name=c["name"],
            type=c["type"],
            active=c.get("active", True),
            parent_id=c.get("parent_id"),
            code=c.get("code"),
        )
        for c in data.get("categories") or []
    )
    lines = [
        BudgetLine(
            id=f"line-{index}",
            budget_id="report",
            category_id=str(line["category"]),
            concept=line.get("concept", ""),
            projected_amount=line["projected_amount"],
            monthly_distribution=(
                tuple(line["monthly_distribution"])
                if line.get("monthly_distribution") is not None else None
            ),
            notes=line.get("notes"),
        )
        for index, line in enumerate(data.get("lines") or [], start=1)
    ]
    actuals = [
        ActualEntry(
            category_id=str(entry["category"]),
            month=int(entry["month"]),
            year=int(entry.get("year", year)),
            amount=entry["amount"],
        )
        for entry in data.get("actuals") or []
    ]
    return year, scope, catalog, lines, actuals


def _first_given(*values: Any) -> Any:
    """The first value that is not None; 0 and "0" count as given."""
    return next((value for value in values if value is not None), None)


def build_report(
    data: dict[str, Any],
    config: AnalyticsConfig,
    scenario: str | None = None,
    inflation_rate_pct: str | None = None,
    years: int | None = None,
) -> dict[str, Any]:
    """Run every engine over one input document and return a JSON-ready dict."""
    year, scope, catalog, lines, actuals = parse_input(data)
    request = data.get("projection") or {}

    matrix = CashFlowMatrixBuilder().build(
        year=year,
        scope=scope,
        categories=catalog,
        budget_lines=lines,
        actuals=actuals,
    )
    summary = SummaryAggregator().summarize(matrix)

    base: AnnualSummary = summary.projected.annual
    projections = ProjectionEngine(config.projection.growth_table()).project(
        base=base,
        scenario=Scenario(_first_given(scenario, request.get("scenario"), Scenario.REALISTIC.value)),
        inflation_rate_pct=_first_given(
            inflation_rate_pct,
            request.get("inflation_rate_pct"),
            config.projection.default_inflation_rate_pct,
        ),
        years=int(_first_given(
            years,
            request.get("years"),
            config.projection.default_horizon_years,
        )),
    )

    income, expenses = compute_totals(lines, catalog)
    budget = Budget(
        id="report",
        name=data.get("name", f"Budget {year}"),
        year=year,
        scope=scope,
        total_income=income,
        total_expenses=expenses,
    )
    analysis = BudgetAnalytics(config.thresholds).analyze_budget(budget, lines, catalog)

    return {
        "config": {"config_id": config.config_id, "checksum": config.checksum},
        "matrix": matrix.to_dict(),
        "summary": summary.to_dict(),
        "projection": [p.to_dict() for p in projections],
        "analytics": analysis.to_dict(),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Parks cash-flow report")
    parser.add_argument("input", type=Path, help="YAML file with categories, lines and actuals")
    parser.add_argument("--config", type=Path, default=None, help="Analytics configuration YAML")
    parser.add_argument("--scenario", choices=[s.value for s in Scenario], default=None)
    parser.add_argument("--inflation", default=None, help="Inflation rate in percent, e.g. 3.5")
    parser.add_argument("--years", type=int, default=None, help="Projection horizon")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs on stderr")
    args = parser.parse_args(argv)

    if args.verbose:
        configure_logging(stream=sys.stderr)

    try:
        config = get_active_config(args.config)
        data = load_yaml_file(args.input)
        report = build_report(
            data,
            config,
            scenario=args.scenario,
            inflation_rate_pct=args.inflation,
            years=args.years,
        )
    except ParksFinanceError as e:
        print(f"Error [{e.code}]: {e}", file=sys.stderr)
        return 1
    except ArithmeticError as e:
        print(f"Error: calculation failed: {e!r}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}", file=sys.stderr)
        return 2
    except (KeyError, ValueError) as e:
        print(f"Error: invalid input: {e}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
