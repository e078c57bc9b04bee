# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Trailing-window financial baseline.

The baseline summarizes the most recent monthly aggregates into the three
figures the break-even, runway and projection computations are built on:

- ``fixed_costs``: average fixed expenses per month,
- ``variable_rate``: variable expenses as a share of income (decimal),
- ``average_income``: average recurring income per month,

plus the current cash balance, which is an external figure passed through
unchanged.

The window is made of the last ``lookback_months`` *aggregates*, not the
last ``lookback_months`` calendar months: months without activity have no
aggregate and are therefore not counted.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from .amounts import round_amount
from .engine import MonthlyAggregate

DEFAULT_LOOKBACK_MONTHS = 6


@dataclass(frozen=True)
class ProjectionBaseline:
    """Average cost structure and income over the trailing window."""

    fixed_costs: float
    variable_rate: float
    average_income: float
    cash_balance: float
    months_used: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate_projection_baseline(
    aggregates: Sequence[MonthlyAggregate],
    cash_balance: float,
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS,
) -> ProjectionBaseline:
    """
    Compute the projection baseline from ascending monthly aggregates.

    Args:
        aggregates: Output of ``build_monthly_aggregates`` (ascending).
        cash_balance: Current cash figure, passed through unchanged.
        lookback_months: Number of trailing aggregates to use. When fewer
            aggregates exist, all of them are used; a non-positive value
            also means "all of them".

    Returns:
        A ProjectionBaseline. With no aggregates, every derived figure is
        0.0 and only the cash balance is set.
    """
    if lookback_months > 0:
        window = list(aggregates)[-lookback_months:]
    else:
        window = list(aggregates)

    if not window:
        return ProjectionBaseline(
            fixed_costs=0.0,
            variable_rate=0.0,
            average_income=0.0,
            cash_balance=cash_balance,
            months_used=0,
        )

    total_fixed = sum(m.fixed_expenses for m in window)
    total_variable = sum(m.variable_expenses for m in window)
    total_income = sum(m.income for m in window)
    count = len(window)

    if total_income > 0:
        variable_rate = round_amount(total_variable / total_income)
    else:
        variable_rate = 0.0

    return ProjectionBaseline(
        fixed_costs=round_amount(total_fixed / count),
        variable_rate=variable_rate,
        average_income=round_amount(total_income / count),
        cash_balance=cash_balance,
        months_used=count,
    )
