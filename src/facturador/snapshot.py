# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial snapshot: the headline figures of the dashboard.

The snapshot gathers, for a set of normalized invoices and expenses:

- totals: invoiced, collected, pending, overdue, expenses and cash profit
  (collected - expenses),
- counts: invoices, expenses and open (not fully paid) invoices,
- monthly performance: income, expenses, profit and cumulative profit per
  month,
- momentum: percent change of income and expenses between the last two
  months with activity,
- collection follow-up: overdue invoices and invoices due within a week
  (at most 8 of each, in input order),
- rankings: top clients, top expense categories (with their share of total
  expenses) and top providers,
- highlights: the largest invoice, the largest expense and the most
  recently issued invoice.

Like the rest of the engine it is a pure function of its inputs and of the
reference date.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Optional

from .amounts import round_amount
from .engine import build_monthly_aggregates
from .periods import format_month_label
from .records import (
    INVOICE_PAID,
    ExpenseRecord,
    InvoiceRecord,
    summarize_invoices,
)

RANKING_SIZE = 5
FOLLOW_UP_SIZE = 8
UPCOMING_DAYS = 7


@dataclass(frozen=True)
class SnapshotTotals:
    invoiced: float
    collected: float
    pending: float
    overdue: float
    expenses: float
    profit: float


@dataclass(frozen=True)
class SnapshotCounts:
    invoices: int
    expenses: int
    open_invoices: int


@dataclass(frozen=True)
class MonthlyPerformance:
    month: str
    label: str
    income: float
    expenses: float
    profit: float
    cumulative_profit: float = 0.0


@dataclass(frozen=True)
class Momentum:
    """Month-over-month change between the last two active months (percent)."""

    income_change: float = 0.0
    expense_change: float = 0.0
    latest_month: Optional[str] = None
    previous_month: Optional[str] = None


@dataclass(frozen=True)
class OverdueInvoice:
    invoice_number: str
    client: str
    balance: float
    days_overdue: int


@dataclass(frozen=True)
class UpcomingInvoice:
    invoice_number: str
    client: str
    balance: float
    due_in_days: int


@dataclass(frozen=True)
class ClientTotal:
    client: str
    total: float
    pending: float


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float
    share: float  # percent of total expenses


@dataclass(frozen=True)
class ProviderTotal:
    provider: str
    total: float


@dataclass(frozen=True)
class InvoiceHighlight:
    invoice_number: str
    client: str
    issue_date: date
    total: float
    balance: float
    status: str


@dataclass(frozen=True)
class ExpenseHighlight:
    provider: str
    concept: str
    category: str
    issue_date: date
    total_amount: float


@dataclass(frozen=True)
class Highlights:
    largest_invoice: Optional[InvoiceHighlight] = None
    largest_expense: Optional[ExpenseHighlight] = None
    newest_invoice: Optional[InvoiceHighlight] = None


@dataclass(frozen=True)
class FinancialSnapshot:
    totals: SnapshotTotals
    counts: SnapshotCounts
    monthly_performance: list[MonthlyPerformance] = field(default_factory=list)
    momentum: Momentum = field(default_factory=Momentum)
    overdue_invoices: list[OverdueInvoice] = field(default_factory=list)
    upcoming_invoices: list[UpcomingInvoice] = field(default_factory=list)
    top_clients: list[ClientTotal] = field(default_factory=list)
    top_expense_categories: list[CategoryTotal] = field(default_factory=list)
    top_providers: list[ProviderTotal] = field(default_factory=list)
    highlights: Highlights = field(default_factory=Highlights)
    last_month: Optional[str] = None
    previous_month: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def percent_change(current: float, previous: float) -> float:
    """
    Percent change from ``previous`` to ``current``.

    With no previous value the change is 100.0 if there is a current value,
    0.0 otherwise.
    """
    if not previous:
        return 100.0 if current else 0.0
    return round_amount((current - previous) / previous * 100)


def _top(totals: dict[str, float], size: int = RANKING_SIZE) -> list[tuple[str, float]]:
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:size]


def _invoice_highlight(invoice: InvoiceRecord) -> InvoiceHighlight:
    return InvoiceHighlight(
        invoice_number=invoice.invoice_number,
        client=invoice.client,
        issue_date=invoice.issue_date,
        total=invoice.total,
        balance=invoice.balance,
        status=invoice.status,
    )


def _build_highlights(
    invoices: Sequence[InvoiceRecord], expenses: Sequence[ExpenseRecord]
) -> Highlights:
    # max() keeps the first record on ties
    largest_invoice = newest_invoice = largest_expense = None
    if invoices:
        largest_invoice = _invoice_highlight(max(invoices, key=lambda i: i.total))
        newest_invoice = _invoice_highlight(max(invoices, key=lambda i: i.issue_date))
    if expenses:
        expense = max(expenses, key=lambda e: e.total_amount)
        largest_expense = ExpenseHighlight(
            provider=expense.provider_name,
            concept=expense.concept,
            category=expense.category,
            issue_date=expense.issue_date,
            total_amount=expense.total_amount,
        )
    return Highlights(
        largest_invoice=largest_invoice,
        largest_expense=largest_expense,
        newest_invoice=newest_invoice,
    )


def _build_monthly_performance(
    invoices: Sequence[InvoiceRecord], expenses: Sequence[ExpenseRecord]
) -> list[MonthlyPerformance]:
    out: list[MonthlyPerformance] = []
    cumulative = 0.0
    for agg in build_monthly_aggregates(invoices, expenses):
        profit = round_amount(agg.income - agg.total_expenses)
        cumulative = round_amount(cumulative + profit)
        out.append(
            MonthlyPerformance(
                month=agg.month,
                label=format_month_label(agg.month),
                income=agg.income,
                expenses=agg.total_expenses,
                profit=profit,
                cumulative_profit=cumulative,
            )
        )
    return out


def _build_momentum(monthly: Sequence[MonthlyPerformance]) -> Momentum:
    last = monthly[-1] if monthly else None
    prev = monthly[-2] if len(monthly) > 1 else None
    return Momentum(
        income_change=percent_change(
            last.income if last else 0.0, prev.income if prev else 0.0
        ),
        expense_change=percent_change(
            last.expenses if last else 0.0, prev.expenses if prev else 0.0
        ),
        latest_month=last.label if last else None,
        previous_month=prev.label if prev else None,
    )


def build_financial_snapshot(
    invoices: Sequence[InvoiceRecord],
    expenses: Sequence[ExpenseRecord],
    today: date,
) -> FinancialSnapshot:
    """
    Build the dashboard snapshot for normalized invoices and expenses.

    Args:
        invoices: Normalized invoices.
        expenses: Normalized expenses.
        today: Reference date for overdue and upcoming invoices.

    Returns:
        A FinancialSnapshot. Rankings hold at most 5 entries, sorted by
        descending total; overdue and upcoming lists at most 8 entries.
    """
    summary = summarize_invoices(invoices)
    expenses_total = round_amount(sum(e.total_amount for e in expenses))
    totals = SnapshotTotals(
        invoiced=summary.invoiced,
        collected=summary.collected,
        pending=summary.pending,
        overdue=summary.overdue,
        expenses=expenses_total,
        profit=round_amount(summary.collected - expenses_total),
    )
    counts = SnapshotCounts(
        invoices=len(invoices),
        expenses=len(expenses),
        open_invoices=sum(1 for i in invoices if i.status != INVOICE_PAID),
    )

    monthly = _build_monthly_performance(invoices, expenses)

    # Collection follow-up
    horizon = today + timedelta(days=UPCOMING_DAYS)
    overdue: list[OverdueInvoice] = []
    upcoming: list[UpcomingInvoice] = []
    for invoice in invoices:
        if invoice.status == INVOICE_PAID:
            continue
        delta = (invoice.due_date - today).days
        if invoice.due_date < today:
            overdue.append(
                OverdueInvoice(
                    invoice_number=invoice.invoice_number,
                    client=invoice.client,
                    balance=invoice.balance,
                    days_overdue=abs(delta),
                )
            )
        elif invoice.due_date <= horizon:
            upcoming.append(
                UpcomingInvoice(
                    invoice_number=invoice.invoice_number,
                    client=invoice.client,
                    balance=invoice.balance,
                    due_in_days=delta,
                )
            )

    # Rankings
    client_totals: dict[str, float] = {}
    client_pending: dict[str, float] = {}
    for invoice in invoices:
        client_totals[invoice.client] = client_totals.get(invoice.client, 0.0) + invoice.total
        client_pending[invoice.client] = (
            client_pending.get(invoice.client, 0.0) + invoice.balance
        )

    category_totals: dict[str, float] = {}
    provider_totals: dict[str, float] = {}
    for expense in expenses:
        category_totals[expense.category] = (
            category_totals.get(expense.category, 0.0) + expense.total_amount
        )
        provider_totals[expense.provider_name] = (
            provider_totals.get(expense.provider_name, 0.0) + expense.total_amount
        )

    top_clients = [
        ClientTotal(
            client=name,
            total=round_amount(total),
            pending=round_amount(client_pending[name]),
        )
        for name, total in _top(client_totals)
    ]
    top_categories = [
        CategoryTotal(
            category=name,
            total=round_amount(total),
            share=round_amount(total / expenses_total * 100) if expenses_total > 0 else 0.0,
        )
        for name, total in _top(category_totals)
    ]
    top_providers = [
        ProviderTotal(provider=name, total=round_amount(total))
        for name, total in _top(provider_totals)
    ]

    return FinancialSnapshot(
        totals=totals,
        counts=counts,
        monthly_performance=monthly,
        momentum=_build_momentum(monthly),
        overdue_invoices=overdue[:FOLLOW_UP_SIZE],
        upcoming_invoices=upcoming[:FOLLOW_UP_SIZE],
        top_clients=top_clients,
        top_expense_categories=top_categories,
        top_providers=top_providers,
        highlights=_build_highlights(invoices, expenses),
        last_month=monthly[-1].month if monthly else None,
        previous_month=monthly[-2].month if len(monthly) > 1 else None,
    )
