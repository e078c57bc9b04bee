# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Facturador Insight.

The CLI is intentionally thin: it does not implement financial logic
itself. It wires together:

- the TOML configuration (config.py),
- the invoice and expense exports (io.py),
- the dashboard orchestration (dashboard.py),
- the tabular views (views.py),

and renders the requested scope as console tables, CSV files and/or JSON.


High-level pipeline
-------------------

1) Load the configuration (``facturador_config.toml`` by default, or
   ``--config PATH``). When no configuration file exists, defaults are used.

2) Resolve the invoice and expense exports: ``--invoices`` / ``--expenses``
   override the ``[inputs]`` paths of the configuration.

3) Read raw rows, normalize them and compute every dashboard figure for the
   reference date (``--today YYYY-MM-DD``, default: today).

4) Render the selected scope.


Scopes
------

- ``summary``:      headline totals (invoiced, collected, pending, ...),
- ``aggregates``:   monthly income and fixed/variable expenses,
- ``metrics``:      baseline, break-even and runway,
- ``seasonality``:  seasonality index per calendar month,
- ``projection``:   P&L and cash-flow projection,
- ``all`` (default): everything above.


Display modes
-------------

``--display-mode`` overrides ``[display].mode``:

- ``table``: text tables on stdout,
- ``csv``:   one timestamped CSV file per table in ``--output``
             (default ``data/output``),
- ``json``:  the serialized dashboard on stdout, restricted to the scope,
- ``both``:  tables and CSV files.


Examples
--------

    python -m facturador.cli --invoices invoices.csv --expenses expenses.csv

    python -m facturador.cli --scope projection --months 6 --growth 1.02

    python -m facturador.cli --display-mode json --today 2025-03-31
"""

import argparse
import dataclasses
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DEFAULT_CONFIG_FILE, AppConfig, default_app_config, load_app_config
from .dashboard import DashboardResult, compute_dashboard
from .io import read_expense_rows, read_invoice_rows
from .views import (
    aggregates_to_dataframe,
    metrics_to_dataframe,
    projection_to_dataframe,
    seasonality_to_dataframe,
    snapshot_totals_to_dataframe,
)

logger = logging.getLogger(__name__)

SCOPES: tuple[str, ...] = (
    "summary",
    "aggregates",
    "metrics",
    "seasonality",
    "projection",
    "all",
)

# Keys of DashboardResult.to_dict() rendered for each scope in JSON mode.
JSON_SCOPE_KEYS: dict[str, tuple[str, ...]] = {
    "summary": ("snapshot",),
    "aggregates": ("monthly_aggregates",),
    "metrics": ("projection_baseline", "financial_metrics"),
    "seasonality": ("seasonality",),
    "projection": ("income_projection", "pnl_projection", "cashflow_projection"),
}
JSON_COMMON_KEYS: tuple[str, ...] = ("today", "currency", "defaulted_records")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m facturador.cli",
        description=(
            "Facturador Insight - accounting dashboard for small businesses. "
            "Reads invoice and expense exports, aggregates them per month and "
            "computes break-even, runway and a seasonality-adjusted projection."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of facturador and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )

    # Inputs
    ap.add_argument(
        "--invoices",
        dest="invoices_path",
        help="Invoice export (CSV or JSON). Overrides [inputs].invoices.",
    )
    ap.add_argument(
        "--expenses",
        dest="expenses_path",
        help="Expense export (CSV or JSON). Overrides [inputs].expenses.",
    )
    ap.add_argument(
        "--cash-balance",
        dest="cash_balance",
        type=float,
        help=(
            "Current cash balance. Overrides [inputs].cash_balance; when neither "
            "is set, the collected invoice total is used."
        ),
    )
    ap.add_argument(
        "--today",
        dest="today",
        help="Reference date (YYYY-MM-DD). Defaults to the current date.",
    )

    # Projection parameters
    ap.add_argument(
        "--months",
        dest="projection_months",
        type=int,
        help="Number of months to project. Overrides [projection].projection_months.",
    )
    ap.add_argument(
        "--growth",
        dest="growth_factor",
        type=float,
        help=(
            "Monthly compounding growth factor (1.0 = flat, 1.01 = +1%% per "
            "month). Overrides [projection].growth_factor_monthly."
        ),
    )
    ap.add_argument(
        "--lookback",
        dest="lookback_months",
        type=int,
        help="Trailing months used for the baseline. Overrides [projection].lookback_months.",
    )

    # Rendering
    ap.add_argument(
        "--scope",
        choices=list(SCOPES),
        default="all",
        help="Select what to render, in every display mode (default: all).",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "json", "both"],
        help="Override the display.mode setting from the configuration file.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory for CSV files (default: data/output).",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return ap


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config_path:
        return load_app_config(args.config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return default_app_config()


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of ``config`` with CLI overrides applied."""
    projection = config.projection
    if args.projection_months is not None:
        projection = dataclasses.replace(
            projection, projection_months=args.projection_months
        )
    if args.growth_factor is not None:
        projection = dataclasses.replace(
            projection, growth_factor_monthly=args.growth_factor
        )
    if args.lookback_months is not None:
        projection = dataclasses.replace(
            projection, lookback_months=args.lookback_months
        )

    display = config.display
    if args.display_mode:
        display = dataclasses.replace(display, mode=args.display_mode)

    return dataclasses.replace(config, projection=projection, display=display)


def _build_tables(
    result: DashboardResult, scope: str, decimals: int
) -> list[tuple[str, str, pd.DataFrame]]:
    """Return (file stem, title, table) for every table in the scope."""
    tables: list[tuple[str, str, pd.DataFrame]] = []
    if scope in {"summary", "all"}:
        tables.append(
            ("summary", "Resumen", snapshot_totals_to_dataframe(result.snapshot))
        )
    if scope in {"aggregates", "all"}:
        tables.append(
            (
                "monthly_aggregates",
                "Resultados mensuales",
                aggregates_to_dataframe(result.aggregates),
            )
        )
    if scope in {"metrics", "all"}:
        tables.append(
            (
                "metrics",
                "Indicadores",
                metrics_to_dataframe(result.baseline, result.metrics, decimals),
            )
        )
    if scope in {"seasonality", "all"}:
        tables.append(
            (
                "seasonality",
                "Estacionalidad",
                seasonality_to_dataframe(result.seasonality),
            )
        )
    if scope in {"projection", "all"}:
        tables.append(
            (
                "projection",
                "Proyección",
                projection_to_dataframe(
                    result.pnl_projection, result.cashflow_projection
                ),
            )
        )
    return tables


def _json_payload(result: DashboardResult, scope: str) -> dict:
    """Serialized dashboard restricted to the keys of the scope."""
    data = result.to_dict()
    if scope == "all":
        return data
    keys = JSON_COMMON_KEYS + JSON_SCOPE_KEYS[scope]
    return {key: data[key] for key in keys}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Facturador Insight CLI.

    Parses command-line arguments, loads the configuration, reads the
    invoice and expense exports, computes the dashboard for the reference
    date and renders the selected scope as console tables, CSV files or
    JSON.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"facturador version {__version__}")
        return

    # 1) Configuration
    try:
        config = _load_config(args)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format=LOG_FORMAT,
    )

    config = _apply_overrides(config, args)
    if config.projection.growth_factor_monthly <= 0:
        parser.error("--growth must be a positive factor.")

    # 2) Inputs
    invoices_path = (
        Path(args.invoices_path) if args.invoices_path else config.inputs.invoices
    )
    expenses_path = (
        Path(args.expenses_path) if args.expenses_path else config.inputs.expenses
    )
    if invoices_path is None or expenses_path is None:
        parser.error(
            "No invoice/expense exports configured. Either set [inputs] in the "
            "configuration or provide --invoices and --expenses."
        )

    today: Optional[date] = None
    if args.today:
        try:
            today = date.fromisoformat(args.today)
        except ValueError:
            parser.error(f"Invalid --today value {args.today!r}, expected YYYY-MM-DD.")

    try:
        invoice_rows = read_invoice_rows(invoices_path)
        expense_rows = read_expense_rows(expenses_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logger.info(
        "Read %d invoice rows from %s and %d expense rows from %s",
        len(invoice_rows),
        invoices_path,
        len(expense_rows),
        expenses_path,
    )

    # 3) Compute
    result = compute_dashboard(
        invoice_rows,
        expense_rows,
        today=today,
        cash_balance=args.cash_balance,
        config=config,
    )

    # stdout carries the rendered output only
    if result.defaulted_records:
        print(
            f"Warning: {result.defaulted_records} record(s) had missing or "
            f"unparseable dates and were dated {result.today.isoformat()}.",
            file=sys.stderr,
        )

    # 4) Render
    display_mode = config.display.mode

    if display_mode == "json":
        payload = _json_payload(result, args.scope)
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    tables = _build_tables(result, args.scope, config.display.ratio_decimals)

    if display_mode in {"table", "both"}:
        print(f"Reference date: {result.today.isoformat()} | Currency: {result.currency}")
        for _, title, df in tables:
            print()
            print(f"=== {title} ===")
            if df.empty:
                print("(sin datos)")
            else:
                print(df.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for stem, _, df in tables:
            path = output_dir / f"{stem}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


if __name__ == "__main__":
    main()
