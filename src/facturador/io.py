# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Facturador Insight.

This module reads exports of the ``invoices`` and ``expenses`` tables and
returns them as raw rows (plain dicts with the persisted column names),
ready for normalization by records.py.

Supported formats
-----------------
- CSV (``.csv``): one row per record, header with the persisted column
  names. Every cell is read as text; amounts are converted during
  normalization.
- JSON (``.json``): a list of objects (records orientation), as returned
  by the database REST API.

Column names are case-insensitive. Empty cells and JSON nulls become
``None``. Any column not used by the engine is kept in the row and ignored
downstream.

Required columns
----------------
- invoices: ``issue_date`` and at least one of ``total`` / ``amount``,
- expenses: ``issue_date`` and at least one of ``total_amount`` /
  ``base_amount``.

If a file does not match these requirements, a clear ValueError is raised.
"""

import os
from pathlib import Path
from typing import Any, Union

import pandas as pd

PathLike = Union[str, "os.PathLike[str]"]

INVOICE_AMOUNT_COLUMNS: tuple[str, ...] = ("total", "amount")
EXPENSE_AMOUNT_COLUMNS: tuple[str, ...] = ("total_amount", "base_amount")


def _read_table(path: PathLike) -> pd.DataFrame:
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Export file not found: {file_path}")

    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(file_path, dtype=str)
    elif suffix == ".json":
        try:
            df = pd.read_json(
                file_path, orient="records", dtype=False, convert_dates=False
            )
        except ValueError as exc:
            raise ValueError(f"Invalid JSON export: {file_path}") from exc
    else:
        raise ValueError(
            f"Unsupported export format {suffix!r} for {file_path}. "
            "Expected a .csv or .json file."
        )

    df.columns = [str(c).lower().strip() for c in df.columns]
    return df


def _to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a DataFrame to a list of dicts with NaN replaced by None."""
    if df.empty:
        return []
    cleaned = df.astype(object).where(pd.notna(df), None)
    return cleaned.to_dict(orient="records")


def _check_columns(
    df: pd.DataFrame, path: PathLike, kind: str, amount_columns: tuple[str, ...]
) -> None:
    cols = set(df.columns)
    if df.empty and not cols:
        return
    if "issue_date" not in cols or not cols.intersection(amount_columns):
        raise ValueError(
            f"Invalid {kind} export structure in {path}. Expected an "
            f"'issue_date' column and at least one of {list(amount_columns)}."
        )


def read_invoice_rows(path: PathLike) -> list[dict[str, Any]]:
    """
    Read raw invoice rows from a CSV or JSON export.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the format is unsupported or required columns are missing.
    """
    df = _read_table(path)
    _check_columns(df, path, "invoices", INVOICE_AMOUNT_COLUMNS)
    return _to_rows(df)


def read_expense_rows(path: PathLike) -> list[dict[str, Any]]:
    """
    Read raw expense rows from a CSV or JSON export.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the format is unsupported or required columns are missing.
    """
    df = _read_table(path)
    _check_columns(df, path, "expenses", EXPENSE_AMOUNT_COLUMNS)
    return _to_rows(df)
