"""
Parks Finance Kernel

Foundation layer for the parks budget and cash-flow analytics engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Pure domain types (categories, budgets, lines, actuals, ratios)
- Database base classes and session management
"""

__version__ = "0.1.0"
