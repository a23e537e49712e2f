"""
Parks Modules.

Thin orchestration layers over the Parks Kernel and Engines.
Each module contains:
- ORM persistence models
- Read-only selectors
- Configuration schema
- Services that own the transaction boundary and invoke engines

Modules:
- Budget: categories, budgets, budget lines, actuals, cash-flow analytics
"""
