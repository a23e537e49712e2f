"""Read-only selectors (query side)."""

from parks_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
