"""
parks_engines.variance -- Projected-versus-real percentage variance.

Responsibility:
    The single definition of variance used by the cash-flow matrix, the
    per-category totals and the summary rollups.  Every zero-denominator
    case is a named branch (``VarianceBranch``), never a NaN or Infinity.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Imports only parks_kernel.domain values.

Invariants enforced:
    - projected == 0 and real == 0            -> 0    (BOTH_ZERO)
    - projected == 0 and real != 0            -> 100  (UNPLANNED)
    - otherwise (real - projected) / projected * 100  (PROPORTIONAL)
    - variance is 0 whenever projected == real.
    - Net variance divides by abs(projected_net): net can be negative, and a
      signed denominator would report a shrinking deficit as a negative
      variance.

Failure modes:
    - None.  Inputs are Decimals; every branch returns a Decimal.

Usage:
    from parks_engines.variance import variance_percent

    variance_percent(projected=Decimal("10000"), real=Decimal("12000"))
    # Decimal("20")
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from parks_kernel.domain.values import HUNDRED, ZERO


class VarianceBranch(str, Enum):
    """Which branch of the variance formula applies."""

    BOTH_ZERO = "both_zero"
    UNPLANNED = "unplanned"
    PROPORTIONAL = "proportional"


def classify(projected: Decimal, real: Decimal) -> VarianceBranch:
    """Select the variance branch for a (projected, real) pair."""
    if projected == ZERO:
        if real == ZERO:
            return VarianceBranch.BOTH_ZERO
        return VarianceBranch.UNPLANNED
    return VarianceBranch.PROPORTIONAL


def variance_percent(projected: Decimal, real: Decimal) -> Decimal:
    """Percentage deviation of real from projected."""
    branch = classify(projected, real)
    if branch is VarianceBranch.BOTH_ZERO:
        return ZERO
    if branch is VarianceBranch.UNPLANNED:
        return HUNDRED
    return (real - projected) / projected * HUNDRED


def net_variance_percent(projected_net: Decimal, real_net: Decimal) -> Decimal:
    """
    Variance of real net against projected net.

    Same zero branches as ``variance_percent``; the proportional branch
    divides by ``abs(projected_net)`` so the sign always means "better than
    planned" (positive) or "worse than planned" (negative).
    """
    branch = classify(projected_net, real_net)
    if branch is VarianceBranch.BOTH_ZERO:
        return ZERO
    if branch is VarianceBranch.UNPLANNED:
        return HUNDRED
    return (real_net - projected_net) / abs(projected_net) * HUNDRED
