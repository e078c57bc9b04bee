# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Forward income, profit-and-loss and cash-flow projections.

The income projection is anchored at the reference date: step ``i``
(1-indexed) targets the ``i``-th calendar month after the current one, and

    projected_income = round_amount(baseline_income
                                    * seasonality[calendar month of target]
                                    * growth_factor_monthly ** i)

The P&L projection attaches the baseline cost structure to each projected
income figure, and the cash-flow projection chains the resulting operating
profit into a running cash balance that starts from the baseline cash.
"""

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Optional

from .amounts import round_amount
from .baseline import ProjectionBaseline
from .engine import MonthlyAggregate
from .periods import forward_months, resolve_today
from .seasonality import DEFAULT_DAMPENING, SeasonalityDampening, analyze_seasonality

DEFAULT_PROJECTION_MONTHS = 12


@dataclass(frozen=True)
class ProjectedIncome:
    month: str
    projected_income: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PnlProjectionRow:
    """Projected accrual result for one month."""

    month: str
    income: float
    variable_costs: float
    fixed_costs: float
    operating_profit: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CashflowProjectionRow:
    """Projected cash movement for one month."""

    month: str
    cash_in: float
    cash_out: float
    net_cash_flow: float
    closing_cash: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def project_income_with_seasonality(
    aggregates: Iterable[MonthlyAggregate],
    baseline_income: float,
    projection_months: int = DEFAULT_PROJECTION_MONTHS,
    growth_factor_monthly: float = 1.0,
    today: Optional[date] = None,
    dampening: SeasonalityDampening = DEFAULT_DAMPENING,
) -> list[ProjectedIncome]:
    """
    Project monthly income for the months following the reference date.

    Args:
        aggregates: Historical monthly aggregates (used for seasonality).
        baseline_income: Average recurring monthly income.
        projection_months: Number of months to project. Non-positive
            values give an empty projection.
        growth_factor_monthly: Compounding monthly growth (1.0 = flat,
            1.01 = +1% per month).
        today: Reference date anchoring the projection.
        dampening: Clamping of the seasonality indices.

    Returns:
        Exactly ``projection_months`` ProjectedIncome rows, in chronological
        order. Without history the seasonality is neutral (1.0).
    """
    anchor = resolve_today(today)
    indices = analyze_seasonality(aggregates, dampening)

    out: list[ProjectedIncome] = []
    for step, period in enumerate(forward_months(anchor, projection_months), start=1):
        index = indices.get(period.month, 1.0)
        growth = growth_factor_monthly**step
        out.append(
            ProjectedIncome(
                month=period.key,
                projected_income=round_amount(baseline_income * index * growth),
            )
        )
    return out


def build_pnl_projection(
    projection: Iterable[ProjectedIncome],
    baseline: ProjectionBaseline,
) -> list[PnlProjectionRow]:
    """
    Attach the baseline cost structure to each projected income figure.

    variable_costs   = income * variable_rate
    fixed_costs      = baseline.fixed_costs
    operating_profit = income - variable_costs - fixed_costs
    """
    rows: list[PnlProjectionRow] = []
    for item in projection:
        variable_costs = round_amount(item.projected_income * baseline.variable_rate)
        operating_profit = round_amount(
            item.projected_income - variable_costs - baseline.fixed_costs
        )
        rows.append(
            PnlProjectionRow(
                month=item.month,
                income=item.projected_income,
                variable_costs=variable_costs,
                fixed_costs=baseline.fixed_costs,
                operating_profit=operating_profit,
            )
        )
    return rows


def build_cashflow_projection(
    pnl: Sequence[PnlProjectionRow],
    opening_cash: float,
) -> list[CashflowProjectionRow]:
    """
    Chain projected operating profit into a running cash balance.

    Each month receives its projected income and pays its variable and fixed
    costs; the closing cash of a month is the opening cash of the next.
    """
    running_cash = opening_cash
    rows: list[CashflowProjectionRow] = []
    for row in pnl:
        running_cash = round_amount(running_cash + row.operating_profit)
        rows.append(
            CashflowProjectionRow(
                month=row.month,
                cash_in=row.income,
                cash_out=round_amount(row.variable_costs + row.fixed_costs),
                net_cash_flow=row.operating_profit,
                closing_cash=running_cash,
            )
        )
    return rows
