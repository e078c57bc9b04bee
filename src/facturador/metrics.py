# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Break-even and cash-runway metrics.

Both metrics are derived from a ProjectionBaseline (baseline.py):

Break-even revenue
    ``fixed_costs / (1 - variable_rate)``: the monthly revenue at which the
    contribution margin covers the fixed costs. When the contribution
    margin ratio is zero or negative, break-even is unreachable
    (``math.inf``) as long as there are fixed costs to cover, and 0.0 when
    there are none.

Runway
    ``cash_balance / net_burn`` with ``net_burn = fixed_costs -
    average_income``: the number of months the current cash lasts at the
    current burn. Variable costs are not part of the burn; they are treated
    as funded by the revenue they come with. When ``net_burn <= 0`` cash does
    not decrease and the runway is ``math.inf``.

Ratios are decimals (0.25, not 25). Presentation layers multiply by 100.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any

from .amounts import round_amount
from .baseline import ProjectionBaseline


@dataclass(frozen=True)
class FinancialMetrics:
    """Break-even revenue and runway, with the figures they derive from."""

    break_even: float
    runway: float
    contribution_margin_ratio: float
    net_burn: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def break_even_revenue(fixed_costs: float, variable_rate: float) -> float:
    """Return the monthly break-even revenue (``math.inf`` if unreachable)."""
    margin_ratio = 1 - variable_rate
    if margin_ratio > 0:
        return round_amount(fixed_costs / margin_ratio)
    if fixed_costs > 0:
        return math.inf
    return 0.0


def cash_runway(cash_balance: float, fixed_costs: float, average_income: float) -> float:
    """Return the runway in months (``math.inf`` when cash is not burning)."""
    net_burn = fixed_costs - average_income
    if net_burn > 0:
        return round_amount(cash_balance / net_burn)
    return math.inf


def calculate_financial_metrics(baseline: ProjectionBaseline) -> FinancialMetrics:
    """Compute break-even revenue and runway from a projection baseline."""
    return FinancialMetrics(
        break_even=break_even_revenue(baseline.fixed_costs, baseline.variable_rate),
        runway=cash_runway(
            baseline.cash_balance, baseline.fixed_costs, baseline.average_income
        ),
        contribution_margin_ratio=round_amount(1 - baseline.variable_rate, 4),
        net_burn=round_amount(baseline.fixed_costs - baseline.average_income),
    )
