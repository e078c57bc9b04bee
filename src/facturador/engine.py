# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly aggregation engine for Facturador Insight.

This module buckets normalized invoices and expenses into calendar-month
aggregates. It is the first step of every downstream computation:

    records (records.py)
        -> build_monthly_aggregates()       (this module)
        -> calculate_projection_baseline()  (baseline.py)
        -> analyze_seasonality()            (seasonality.py)

Cost behaviour
--------------
Expenses are split into fixed and variable costs according to their
category. Which categories are fixed is a business policy, held by a
``CostPolicy`` value rather than by the aggregation code itself. The default
policy treats ``personal``, ``administrativos`` and ``equipos`` as fixed
costs; every other category is variable.

Month keys
----------
The month of a record is the ``YYYY-MM`` prefix of its ISO issue date, i.e.
the calendar month of the issue date as written (no timezone shift).
Months without any activity produce no aggregate: the result is sparse, not
a dense 12-month series.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

from .amounts import round_amount
from .periods import month_key
from .records import ExpenseRecord, InvoiceRecord

DEFAULT_FIXED_CATEGORIES: frozenset[str] = frozenset(
    {"personal", "administrativos", "equipos"}
)


@dataclass(frozen=True)
class CostPolicy:
    """Classification of expense categories into fixed and variable costs."""

    fixed_categories: frozenset[str] = DEFAULT_FIXED_CATEGORIES

    def is_fixed(self, category: str) -> bool:
        return category in self.fixed_categories


DEFAULT_COST_POLICY = CostPolicy()


@dataclass(frozen=True)
class MonthlyAggregate:
    """
    Income and expenses for one calendar month.

    Attributes
    ----------
    month :
        Month key (``YYYY-MM``).
    income :
        Sum of the totals of invoices issued in the month.
    fixed_expenses :
        Sum of the totals of expenses in fixed-cost categories.
    variable_expenses :
        Sum of the totals of expenses in all other categories.
    total_expenses :
        fixed_expenses + variable_expenses.
    """

    month: str
    income: float
    fixed_expenses: float
    variable_expenses: float
    total_expenses: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_monthly_aggregates(
    invoices: Iterable[InvoiceRecord],
    expenses: Iterable[ExpenseRecord],
    policy: CostPolicy = DEFAULT_COST_POLICY,
) -> list[MonthlyAggregate]:
    """Aggregate invoices and expenses into monthly buckets.

    Steps:
        1. Accumulate invoice totals per month key.
        2. Accumulate expense totals per month key, split into fixed and
           variable buckets by ``policy``.
        3. Emit one MonthlyAggregate per month key, sorted ascending, with
           every sum rounded to 2 decimal places.

    Args:
        invoices: Normalized invoices (issue_date, total are used).
        expenses: Normalized expenses (issue_date, total_amount, category).
        policy: Fixed/variable classification of expense categories.

    Returns:
        A list of MonthlyAggregate sorted by month key. A month that only has
        income (or only expenses) appears with zeros on the other side.
    """
    # month key -> [income, fixed, variable]
    buckets: dict[str, list[float]] = {}

    for invoice in invoices:
        bucket = buckets.setdefault(month_key(invoice.issue_date), [0.0, 0.0, 0.0])
        bucket[0] += invoice.total

    for expense in expenses:
        bucket = buckets.setdefault(month_key(expense.issue_date), [0.0, 0.0, 0.0])
        if policy.is_fixed(expense.category):
            bucket[1] += expense.total_amount
        else:
            bucket[2] += expense.total_amount

    out: list[MonthlyAggregate] = []
    for key in sorted(buckets):
        income, fixed, variable = buckets[key]
        out.append(
            MonthlyAggregate(
                month=key,
                income=round_amount(income),
                fixed_expenses=round_amount(fixed),
                variable_expenses=round_amount(variable),
                total_expenses=round_amount(fixed + variable),
            )
        )
    return out
