"""
Values -- Decimal helpers shared by every financial computation.

Responsibility:
    Canonical conversion of raw amounts into ``Decimal`` and the ONLY
    sanctioned rounding functions.  Amounts stay at full precision through
    matrix sums and multi-year compounding; rounding happens only when a
    result is rendered for presentation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - No floats: ``to_decimal`` converts floats through ``str`` so binary
      artifacts (0.1 + 0.2) never enter the computation.
    - Rounding is ROUND_HALF_UP to an explicit quantum, never implicit.

Failure modes:
    - ValueError on values that cannot be parsed as a finite decimal.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

MONTHS_PER_YEAR = 12
MONTHS = tuple(range(1, MONTHS_PER_YEAR + 1))

CURRENCY_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a raw amount (Decimal, int, str or float) to Decimal.

    Raises:
        ValueError: If the value is None, not numeric, NaN or infinite.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValueError(f"Invalid amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return result


def _quantize(value: Decimal, quantum: Decimal) -> Decimal:
    # Precision must cover every integer digit plus the quantum's places
    digits = value.adjusted() - quantum.as_tuple().exponent + 1
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits)
        return value.quantize(quantum, rounding=ROUND_HALF_UP)


def round_currency(amount: Decimal, quantum: Decimal = CURRENCY_QUANTUM) -> Decimal:
    """Round a currency amount for presentation (ROUND_HALF_UP).

    Works for amounts of any magnitude, such as long compounding horizons.
    """
    return _quantize(amount, quantum)


def round_percent(value: Decimal, quantum: Decimal = PERCENT_QUANTUM) -> Decimal:
    """Round a percentage for presentation (ROUND_HALF_UP)."""
    return _quantize(value, quantum)


def zero_vector() -> list[Decimal]:
    """A fresh 12-month vector of zeros."""
    return [ZERO] * MONTHS_PER_YEAR


def validate_month(month: int) -> int:
    """Reject month numbers outside 1..12."""
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= MONTHS_PER_YEAR:
        raise ValueError(f"Month must be an integer in 1..12, got {month!r}")
    return month
