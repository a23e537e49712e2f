"""
Ratio -- Tagged result for divisions whose denominator may be zero.

Responsibility:
    Represents the outcome of a ratio calculation as one of four explicit
    states instead of letting NaN or Infinity leak into results:

        DEFINED              -- a finite Decimal value
        UNBOUNDED            -- positive numerator over a zero denominator
        NEGATIVE_UNBOUNDED   -- negative outcome over a zero denominator
        UNDEFINED            -- no meaningful value; carries a reason

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.  Produced by the
    analytics engines at every zero-denominator branch.

Invariants enforced:
    - ``value`` is a Decimal iff ``kind is DEFINED``.
    - ``to_dict()`` never emits float infinities; unbounded states serialize
      as ``{"kind": "unbounded", "value": None}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from parks_kernel.domain.values import PERCENT_QUANTUM, round_percent


class RatioKind(str, Enum):
    """State of a ratio calculation."""

    DEFINED = "defined"
    UNBOUNDED = "unbounded"
    NEGATIVE_UNBOUNDED = "negative_unbounded"
    UNDEFINED = "undefined"


@dataclass(frozen=True, slots=True)
class Ratio:
    """A ratio or percentage that may be unbounded or undefined."""

    kind: RatioKind
    value: Decimal | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.kind is RatioKind.DEFINED:
            if not isinstance(self.value, Decimal):
                raise ValueError("Defined ratio requires a Decimal value")
        elif self.value is not None:
            raise ValueError(f"{self.kind.value} ratio cannot carry a value")

    @classmethod
    def defined(cls, value: Decimal) -> Ratio:
        return cls(RatioKind.DEFINED, value)

    @classmethod
    def unbounded(cls, reason: str | None = None) -> Ratio:
        return cls(RatioKind.UNBOUNDED, reason=reason)

    @classmethod
    def negative_unbounded(cls, reason: str | None = None) -> Ratio:
        return cls(RatioKind.NEGATIVE_UNBOUNDED, reason=reason)

    @classmethod
    def undefined(cls, reason: str) -> Ratio:
        return cls(RatioKind.UNDEFINED, reason=reason)

    @property
    def is_defined(self) -> bool:
        return self.kind is RatioKind.DEFINED

    def is_negative(self) -> bool:
        """True for a negative defined value or a negative unbounded state."""
        if self.kind is RatioKind.NEGATIVE_UNBOUNDED:
            return True
        return self.is_defined and self.value < 0

    def at_least(self, threshold: Decimal) -> bool:
        """Compare against a threshold; unbounded counts as above any threshold."""
        if self.kind is RatioKind.UNBOUNDED:
            return True
        return self.is_defined and self.value >= threshold

    def below(self, threshold: Decimal) -> bool:
        """Compare against a threshold; negative unbounded counts as below any threshold."""
        if self.kind is RatioKind.NEGATIVE_UNBOUNDED:
            return True
        return self.is_defined and self.value < threshold

    def to_dict(self, quantum: Decimal = PERCENT_QUANTUM) -> dict[str, Any]:
        value = None
        if self.is_defined:
            value = str(round_percent(self.value, quantum))
        return {"kind": self.kind.value, "value": value, "reason": self.reason}

    def __str__(self) -> str:
        if self.is_defined:
            return str(self.value)
        return self.kind.value
