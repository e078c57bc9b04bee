import math

import pytest

from facturador.dashboard import compute_dashboard
from facturador.views import (
    AGGREGATE_COLUMNS,
    PROJECTION_COLUMNS,
    aggregates_to_dataframe,
    metrics_to_dataframe,
    projection_to_dataframe,
    seasonality_to_dataframe,
    snapshot_totals_to_dataframe,
)


@pytest.fixture
def result(invoice_rows, expense_rows, today):
    return compute_dashboard(invoice_rows, expense_rows, today=today)


def test_aggregates_to_dataframe(result) -> None:
    df = aggregates_to_dataframe(result.aggregates)

    assert list(df.columns) == AGGREGATE_COLUMNS
    assert df["label"].tolist() == ["enero de 2024", "febrero de 2024", "marzo de 2024"]
    assert df["result"].tolist() == pytest.approx([880.0, 2260.0, 1670.0])


def test_empty_aggregates() -> None:
    df = aggregates_to_dataframe([])
    assert df.empty
    assert list(df.columns) == AGGREGATE_COLUMNS


def test_metrics_to_dataframe(result) -> None:
    df = metrics_to_dataframe(result.baseline, result.metrics, decimals=1)
    values = dict(zip(df["key"], df["value"]))

    # ratios are shown as percentages
    assert values["variable_rate"] == pytest.approx(6.0)
    assert values["contribution_margin_ratio"] == pytest.approx(94.0)
    assert values["fixed_costs"] == pytest.approx(66.7)
    assert math.isinf(values["runway"])
    assert set(df["unit"]) == {"amount", "percent", "months"}


def test_seasonality_to_dataframe(result) -> None:
    df = seasonality_to_dataframe(result.seasonality)

    assert len(df) == 12
    assert df["month_name"].iloc[0] == "enero"
    assert df["index"].iloc[0] == 2.0


def test_projection_to_dataframe(result) -> None:
    df = projection_to_dataframe(result.pnl_projection, result.cashflow_projection)

    assert list(df.columns) == PROJECTION_COLUMNS
    assert len(df) == 12
    assert df["closing_cash"].iloc[0] == pytest.approx(2945.23)
    assert (df["income"] == df["cash_in"]).all()


def test_empty_projection_to_dataframe() -> None:
    df = projection_to_dataframe([], [])
    assert df.empty
    assert list(df.columns) == PROJECTION_COLUMNS


def test_snapshot_totals_to_dataframe(result) -> None:
    df = snapshot_totals_to_dataframe(result.snapshot)
    values = dict(zip(df["key"], df["value"]))

    assert values["invoiced"] == pytest.approx(5310.0)
    assert values["open_invoices"] == 2
    assert values["income_change"] == pytest.approx(-25.0)
    assert values["expense_change"] == 0.0
