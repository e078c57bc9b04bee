# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Facturador Insight
------------------

The financial engine behind an accounting dashboard for small businesses
invoicing under SUNAT (Peru). It turns raw invoice and expense records into
the figures the dashboard and its financial assistant are built on.

Main capabilities:
- normalization of persisted invoice/expense rows (balances, statuses),
- monthly aggregation with a fixed/variable cost split by category,
- a trailing-window baseline (fixed costs, variable-cost rate, income),
- break-even revenue and cash runway,
- a seasonality index per calendar month with outlier dampening,
- a seasonality-adjusted income projection, chained into P&L and cash-flow
  projections,
- a dashboard snapshot (totals, overdue follow-up, rankings).

All computations are pure functions of their inputs and of an explicit
reference date. Persistence, UI, authentication and the LLM call that
narrates the figures live outside this package.

Usage:
    python -m facturador.cli --help
"""

__all__ = [
    "amounts",
    "records",
    "engine",
    "baseline",
    "metrics",
    "seasonality",
    "projection",
    "snapshot",
    "dashboard",
]

__version__ = "0.1.0"
