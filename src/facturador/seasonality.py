# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Seasonality index per calendar month.

The index of a calendar month is its average historical income divided by
the average of the twelve monthly averages (1.0 = an average month).
Observations of the same calendar month are pooled across years.

Calendar months without history count as 0.0 in the global average, which
pulls it down when history covers less than a year. Extreme indices are then
dampened to a bounded range: anything above 2.5 becomes 2.0 and anything
below 0.3 becomes 0.5. The thresholds and targets are fixed presentation
bounds, not a statistical winsorization, and projections rely on them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .amounts import round_amount
from .engine import MonthlyAggregate
from .periods import parse_month_key

logger = logging.getLogger(__name__)

CALENDAR_MONTHS: tuple[int, ...] = tuple(range(1, 13))


@dataclass(frozen=True)
class SeasonalityDampening:
    """Clamping applied to raw seasonality indices."""

    high_threshold: float = 2.5
    high_value: float = 2.0
    low_threshold: float = 0.3
    low_value: float = 0.5

    def apply(self, index: float) -> float:
        if index > self.high_threshold:
            return self.high_value
        if index < self.low_threshold:
            return self.low_value
        return index


DEFAULT_DAMPENING = SeasonalityDampening()


def neutral_seasonality() -> dict[int, float]:
    """Return an index of 1.0 for every calendar month."""
    return {m: 1.0 for m in CALENDAR_MONTHS}


def analyze_seasonality(
    aggregates: Iterable[MonthlyAggregate],
    dampening: SeasonalityDampening = DEFAULT_DAMPENING,
) -> dict[int, float]:
    """
    Compute the dampened seasonality index of each calendar month.

    Args:
        aggregates: Monthly aggregates, in any order.
        dampening: Clamping thresholds and targets.

    Returns:
        A dict with exactly the keys 1..12. With no history, or when the
        global average income is not positive, every index is 1.0.
    """
    incomes_by_month: dict[int, list[float]] = {m: [] for m in CALENDAR_MONTHS}
    observed = 0
    for agg in aggregates:
        period = parse_month_key(agg.month)
        if period is None:
            logger.debug("Skipping aggregate with malformed month key %r", agg.month)
            continue
        incomes_by_month[period.month].append(agg.income)
        observed += 1

    if observed == 0:
        return neutral_seasonality()

    month_averages = {
        m: (sum(values) / len(values) if values else 0.0)
        for m, values in incomes_by_month.items()
    }
    global_average = sum(month_averages.values()) / len(month_averages)

    if global_average <= 0:
        return neutral_seasonality()

    return {
        m: dampening.apply(round_amount(month_averages[m] / global_average))
        for m in CALENDAR_MONTHS
    }
