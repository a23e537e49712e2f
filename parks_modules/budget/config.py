"""
Budget Module Configuration Schema.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from parks_kernel.logging_config import get_logger

logger = get_logger("modules.budget.config")


@dataclass
class BudgetModuleConfig:
    """Configuration schema for the budget module."""

    default_currency: str = "MXN"
    variance_alert_pct: Decimal = Decimal("10.0")

    def __post_init__(self):
        if self.variance_alert_pct < 0:
            raise ValueError("variance_alert_pct cannot be negative")
        logger.info("budget_module_config_initialized", extra={
            "default_currency": self.default_currency,
            "variance_alert_pct": str(self.variance_alert_pct),
        })

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()
