# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Single-pass orchestration of the dashboard computations.

``compute_dashboard()`` is the high-level entry point used by the CLI and by
any presentation or prompt-building layer. From raw invoice and expense rows
it runs the full chain once:

1. normalize the rows into InvoiceRecord / ExpenseRecord (records.py),
2. build the financial snapshot (snapshot.py),
3. aggregate records per month (engine.py),
4. compute the trailing baseline (baseline.py),
5. derive break-even and runway (metrics.py),
6. compute the seasonality index (seasonality.py),
7. project income, P&L and cash flow (projection.py).

The reference date is the only ambient input: it defaults to the real clock
here, and is passed explicitly to every step below.

Serialization
-------------
``DashboardResult.to_dict()`` returns plain data with stable snake_case
field names, suitable for JSON export or for embedding in an LLM prompt.
Non-finite numbers (an unreachable break-even, an infinite runway) are
serialized as ``None`` since JSON has no infinity.
"""

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .baseline import ProjectionBaseline, calculate_projection_baseline
from .config import AppConfig, default_app_config
from .engine import MonthlyAggregate, build_monthly_aggregates
from .metrics import FinancialMetrics, calculate_financial_metrics
from .periods import resolve_today
from .projection import (
    CashflowProjectionRow,
    PnlProjectionRow,
    ProjectedIncome,
    build_cashflow_projection,
    build_pnl_projection,
    project_income_with_seasonality,
)
from .records import (
    ExpenseRecord,
    InvoiceRecord,
    normalize_expense_rows,
    normalize_invoice_rows,
)
from .seasonality import analyze_seasonality
from .snapshot import FinancialSnapshot, build_financial_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardResult:
    """All figures computed for one dashboard run."""

    today: date
    currency: str
    invoices: list[InvoiceRecord]
    expenses: list[ExpenseRecord]
    snapshot: FinancialSnapshot
    aggregates: list[MonthlyAggregate]
    baseline: ProjectionBaseline
    metrics: FinancialMetrics
    seasonality: dict[int, float]
    income_projection: list[ProjectedIncome]
    pnl_projection: list[PnlProjectionRow]
    cashflow_projection: list[CashflowProjectionRow]

    @property
    def defaulted_records(self) -> int:
        """Number of records with at least one defaulted date."""
        return sum(1 for r in self.invoices if r.defaulted_dates) + sum(
            1 for r in self.expenses if r.defaulted_dates
        )

    def to_dict(self) -> dict[str, Any]:
        return _json_safe(
            {
                "today": self.today.isoformat(),
                "currency": self.currency,
                "snapshot": self.snapshot.to_dict(),
                "monthly_aggregates": [a.to_dict() for a in self.aggregates],
                "projection_baseline": self.baseline.to_dict(),
                "financial_metrics": self.metrics.to_dict(),
                "seasonality": {str(m): v for m, v in self.seasonality.items()},
                "income_projection": [p.to_dict() for p in self.income_projection],
                "pnl_projection": [p.to_dict() for p in self.pnl_projection],
                "cashflow_projection": [c.to_dict() for c in self.cashflow_projection],
                "defaulted_records": self.defaulted_records,
            }
        )


def _json_safe(value: Any) -> Any:
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    return value


def compute_dashboard(
    invoice_rows: Iterable[Mapping[str, Any]],
    expense_rows: Iterable[Mapping[str, Any]],
    *,
    today: Optional[date] = None,
    cash_balance: Optional[float] = None,
    config: Optional[AppConfig] = None,
) -> DashboardResult:
    """
    Compute every dashboard figure from raw invoice and expense rows.

    Args:
        invoice_rows: Raw persisted invoice rows.
        expense_rows: Raw persisted expense rows.
        today: Reference date. Defaults to the current local date.
        cash_balance: Current cash. When omitted, ``config.inputs.cash_balance``
            is used, and failing that the collected invoice total.
        config: Application configuration (cost policy, projection
            parameters, dampening). Defaults to ``default_app_config()``.

    Returns:
        A DashboardResult.
    """
    cfg = config or default_app_config()
    ref = resolve_today(today)

    invoices = normalize_invoice_rows(invoice_rows, ref)
    expenses = normalize_expense_rows(expense_rows, ref)
    snapshot = build_financial_snapshot(invoices, expenses, ref)

    if cash_balance is None:
        cash_balance = cfg.inputs.cash_balance
    if cash_balance is None:
        cash_balance = snapshot.totals.collected

    aggregates = build_monthly_aggregates(invoices, expenses, cfg.cost_policy)
    baseline = calculate_projection_baseline(
        aggregates,
        cash_balance=cash_balance,
        lookback_months=cfg.projection.lookback_months,
    )
    metrics = calculate_financial_metrics(baseline)
    seasonality = analyze_seasonality(aggregates, cfg.dampening)

    income_projection = project_income_with_seasonality(
        aggregates,
        baseline_income=baseline.average_income,
        projection_months=cfg.projection.projection_months,
        growth_factor_monthly=cfg.projection.growth_factor_monthly,
        today=ref,
        dampening=cfg.dampening,
    )
    pnl = build_pnl_projection(income_projection, baseline)
    cashflow = build_cashflow_projection(pnl, opening_cash=baseline.cash_balance)

    result = DashboardResult(
        today=ref,
        currency=cfg.currency,
        invoices=invoices,
        expenses=expenses,
        snapshot=snapshot,
        aggregates=aggregates,
        baseline=baseline,
        metrics=metrics,
        seasonality=seasonality,
        income_projection=income_projection,
        pnl_projection=pnl,
        cashflow_projection=cashflow,
    )

    if result.defaulted_records:
        logger.warning(
            "%d record(s) had missing or unparseable dates and were dated %s",
            result.defaulted_records,
            ref.isoformat(),
        )
    logger.debug(
        "Dashboard computed: %d invoices, %d expenses, %d months of history",
        len(invoices),
        len(expenses),
        len(aggregates),
    )
    return result
