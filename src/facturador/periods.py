# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Month and reference-date helpers for Facturador Insight.

Every computation that depends on "today" (invoice due-date status, the
anchor of the income projection, overdue/upcoming lists) receives the
reference date as an explicit argument. Only the outermost callers (the
dashboard orchestration and the CLI) fall back to the real clock, through
``resolve_today()``.

Month keys are ``YYYY-MM`` strings. Their lexicographic order is also their
chronological order, which is what the aggregation engine relies on.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

SPANISH_MONTHS: tuple[str, ...] = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


@dataclass(frozen=True)
class MonthPeriod:
    """A calendar month identified by its ``YYYY-MM`` key."""

    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{SPANISH_MONTHS[self.month - 1]} de {self.year}"


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def resolve_today(today: Optional[date] = None) -> date:
    """Return ``today`` when given, otherwise the current local date."""
    if today is None:
        return _today()
    if isinstance(today, datetime):
        return today.date()
    return today


def month_key(value: date) -> str:
    """Return the ``YYYY-MM`` key of a date."""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month_key(key: str) -> Optional[MonthPeriod]:
    """
    Parse a ``YYYY-MM`` key into a MonthPeriod.

    Returns None if the key is malformed or the month is outside 1..12.
    """
    try:
        year_str, month_str = str(key)[:7].split("-")
        year = int(year_str)
        month = int(month_str)
    except ValueError:
        return None

    if month < 1 or month > 12:
        return None
    return MonthPeriod(year=year, month=month)


def add_months(anchor: date, months: int) -> MonthPeriod:
    """Return the calendar month ``months`` steps after the month of ``anchor``."""
    index = anchor.year * 12 + (anchor.month - 1) + months
    return MonthPeriod(year=index // 12, month=index % 12 + 1)


def forward_months(anchor: date, count: int) -> list[MonthPeriod]:
    """
    Return the ``count`` calendar months following the month of ``anchor``.

    The month of ``anchor`` itself is not included: with an anchor in
    March 2025 and count=2, the result is April 2025 and May 2025.
    """
    return [add_months(anchor, i) for i in range(1, count + 1)]


def format_month_label(key: str) -> str:
    """
    Return a Spanish human-readable label for a month key.

    >>> format_month_label("2024-01")
    'enero de 2024'

    Malformed keys are returned unchanged.
    """
    period = parse_month_key(key)
    if period is None:
        return str(key)
    return period.label
