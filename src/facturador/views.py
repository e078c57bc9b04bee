# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Facturador Insight.

This module turns the engine outputs (value objects and plain lists) into
pandas DataFrames with a stable column order, ready to be printed as text
tables or exported as CSV by the CLI.

Ratios are stored as decimals by the engine; the views are the place where
they are multiplied by 100 for display, with the unit column saying so.
"""

import math
from collections.abc import Mapping, Sequence

import pandas as pd

from .amounts import round_amount
from .baseline import ProjectionBaseline
from .engine import MonthlyAggregate
from .metrics import FinancialMetrics
from .periods import SPANISH_MONTHS, format_month_label
from .projection import CashflowProjectionRow, PnlProjectionRow
from .snapshot import FinancialSnapshot

AGGREGATE_COLUMNS = [
    "month",
    "label",
    "income",
    "fixed_expenses",
    "variable_expenses",
    "total_expenses",
    "result",
]
PROJECTION_COLUMNS = [
    "month",
    "income",
    "variable_costs",
    "fixed_costs",
    "operating_profit",
    "cash_in",
    "cash_out",
    "net_cash_flow",
    "closing_cash",
]
KPI_COLUMNS = ["key", "label", "value", "unit"]


def aggregates_to_dataframe(aggregates: Sequence[MonthlyAggregate]) -> pd.DataFrame:
    """One row per month, with the monthly result (income - expenses)."""
    if not aggregates:
        return pd.DataFrame(columns=AGGREGATE_COLUMNS)

    rows = [
        {
            "month": a.month,
            "label": format_month_label(a.month),
            "income": a.income,
            "fixed_expenses": a.fixed_expenses,
            "variable_expenses": a.variable_expenses,
            "total_expenses": a.total_expenses,
            "result": round_amount(a.income - a.total_expenses),
        }
        for a in aggregates
    ]
    return pd.DataFrame(rows)[AGGREGATE_COLUMNS]


def seasonality_to_dataframe(indices: Mapping[int, float]) -> pd.DataFrame:
    """One row per calendar month (1..12) with its seasonality index."""
    rows = [
        {
            "month_number": m,
            "month_name": SPANISH_MONTHS[m - 1],
            "index": float(indices.get(m, 1.0)),
        }
        for m in range(1, 13)
    ]
    return pd.DataFrame(rows)


def projection_to_dataframe(
    pnl: Sequence[PnlProjectionRow],
    cashflow: Sequence[CashflowProjectionRow],
) -> pd.DataFrame:
    """
    Merge the P&L and cash-flow projections on their month key.

    Both sequences are expected to come from the same income projection and
    therefore to share the same months, in the same order.
    """
    if not pnl:
        return pd.DataFrame(columns=PROJECTION_COLUMNS)

    pnl_df = pd.DataFrame([row.to_dict() for row in pnl])
    cash_df = pd.DataFrame([row.to_dict() for row in cashflow])
    if cash_df.empty:
        return pnl_df.reindex(columns=PROJECTION_COLUMNS)

    df = pnl_df.merge(cash_df, on="month", how="left", sort=False)
    return df[PROJECTION_COLUMNS]


def _display_value(value: float, decimals: int) -> float:
    if math.isinf(value):
        return value
    return round_amount(value, decimals)


def metrics_to_dataframe(
    baseline: ProjectionBaseline,
    metrics: FinancialMetrics,
    decimals: int,
) -> pd.DataFrame:
    """
    Baseline and metrics as a key/label/value/unit table.

    Percent values are multiplied by 100. Unreachable break-even and
    infinite runway are kept as ``inf``.
    """
    rows = [
        ("fixed_costs", "Costos fijos promedio", baseline.fixed_costs, "amount"),
        (
            "variable_rate",
            "Tasa de costo variable",
            baseline.variable_rate * 100,
            "percent",
        ),
        ("average_income", "Ingresos promedio", baseline.average_income, "amount"),
        ("cash_balance", "Saldo de caja", baseline.cash_balance, "amount"),
        (
            "contribution_margin_ratio",
            "Margen de contribución",
            metrics.contribution_margin_ratio * 100,
            "percent",
        ),
        ("net_burn", "Consumo neto mensual", metrics.net_burn, "amount"),
        ("break_even", "Punto de equilibrio", metrics.break_even, "amount"),
        ("runway", "Runway", metrics.runway, "months"),
    ]
    return pd.DataFrame(
        [
            {
                "key": key,
                "label": label,
                "value": _display_value(float(value), decimals),
                "unit": unit,
            }
            for key, label, value, unit in rows
        ],
        columns=KPI_COLUMNS,
    )


def snapshot_totals_to_dataframe(snapshot: FinancialSnapshot) -> pd.DataFrame:
    """Headline totals, counts and month-over-month changes of the snapshot."""
    t = snapshot.totals
    c = snapshot.counts
    rows = [
        ("invoiced", "Facturado", t.invoiced, "amount"),
        ("collected", "Cobrado", t.collected, "amount"),
        ("pending", "Pendiente de cobro", t.pending, "amount"),
        ("overdue", "Vencido", t.overdue, "amount"),
        ("expenses", "Gastos", t.expenses, "amount"),
        ("profit", "Utilidad (cobrado - gastos)", t.profit, "amount"),
        ("invoices", "Facturas", c.invoices, "count"),
        ("expense_records", "Egresos", c.expenses, "count"),
        ("open_invoices", "Facturas abiertas", c.open_invoices, "count"),
        (
            "income_change",
            "Variación de ingresos",
            snapshot.momentum.income_change,
            "percent",
        ),
        (
            "expense_change",
            "Variación de gastos",
            snapshot.momentum.expense_change,
            "percent",
        ),
    ]
    return pd.DataFrame(
        [
            {"key": key, "label": label, "value": value, "unit": unit}
            for key, label, value, unit in rows
        ],
        columns=KPI_COLUMNS,
    )
