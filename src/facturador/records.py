# Facturador Insight - Accounting dashboard & projection engine for SMBs
# Copyright (c) 2025 Facturador Insight contributors
# Licensed under the MIT License. See LICENSE file for details.

"""
Record normalization for Facturador Insight.

This module converts raw persisted rows (as returned by the hosted database
or read from an export, see io.py) into canonical in-memory records:

- ``InvoiceRecord``: an accrued sale, with its computed total, balance and
  lifecycle status (Pendiente / Pagado / Vencido),
- ``ExpenseRecord``: an accrued cost, with its computed total, category and
  payment status (pendiente / pagado / vencido).

Raw rows are plain mappings of nullable primitive fields using the
persisted column names (``invoice_number``, ``issue_date``, ``vat``,
``total_amount``, ...). Normalization is lenient by design of the
reporting engine: missing or unparseable amounts become 0.0 and missing or
unparseable dates fall back to the reference date. Date fallbacks are not
silent for callers, though: each record lists the date fields that were
defaulted in ``defaulted_dates``.

Invoice status resolution
-------------------------
1. The computed status is ``Pagado`` when the balance is zero, otherwise
   ``Vencido`` when the due date is strictly before the reference date,
   otherwise ``Pendiente``.
2. A persisted status (lowercase accounting status) is honoured while it is
   consistent with the balance: a settled invoice is always ``Pagado``, and
   an invoice persisted as ``pagado`` that still has a balance falls back to
   the computed status.
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, NamedTuple, Optional

import pandas as pd

from .amounts import round_amount

logger = logging.getLogger(__name__)

# Lowercase accounting statuses, as persisted.
STATUS_PENDING = "pendiente"
STATUS_PAID = "pagado"
STATUS_OVERDUE = "vencido"
ACCOUNTING_STATUSES: tuple[str, ...] = (STATUS_PENDING, STATUS_PAID, STATUS_OVERDUE)

# Invoice lifecycle labels.
INVOICE_PENDING = "Pendiente"
INVOICE_PAID = "Pagado"
INVOICE_OVERDUE = "Vencido"

ACCOUNTING_STATUS_TO_LABEL: dict[str, str] = {
    STATUS_PENDING: INVOICE_PENDING,
    STATUS_PAID: INVOICE_PAID,
    STATUS_OVERDUE: INVOICE_OVERDUE,
}

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "servicios",
    "materiales",
    "personal",
    "marketing",
    "administrativos",
    "equipos",
    "otros",
)

EXPENSE_DOCUMENT_TYPES: tuple[str, ...] = ("factura", "recibo", "boleta")

DEFAULT_INVOICE_NUMBER = "SIN-CODIGO"
DEFAULT_CLIENT = "Sin cliente"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ParsedDate(NamedTuple):
    """Result of a lenient date parse.

    ``defaulted`` is True when the input was absent or unparseable and
    ``value`` is the reference date used as a fallback.
    """

    value: date
    defaulted: bool


@dataclass(frozen=True)
class InvoiceRecord:
    """Canonical invoice (accrued sale)."""

    record_id: str
    invoice_number: str
    client: str
    client_id: Optional[str]
    ruc: str
    description: str
    issue_date: date
    due_date: date
    amount: float
    vat: float
    total: float
    paid: float
    balance: float
    status: str
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_date: Optional[str] = None
    retention_ir: float = 0.0
    itf: float = 0.0
    category: Optional[str] = None
    defaulted_dates: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExpenseRecord:
    """Canonical expense (accrued cost)."""

    id: str
    document_type: str
    document_series: Optional[str]
    document_number: str
    issue_date: date
    due_date: Optional[date]
    partner_id: Optional[str]
    provider_name: str
    provider_document: Optional[str]
    concept: str
    base_amount: float
    igv_amount: float
    ir_retention: float
    other_taxes: float
    total_amount: float
    category: str
    status: str
    paid_amount: float
    payment_method: Optional[str] = None
    operation_number: Optional[str] = None
    payment_date: Optional[str] = None
    notes: Optional[str] = None
    defaulted_dates: tuple[str, ...] = ()


@dataclass(frozen=True)
class InvoiceSummary:
    """Totals over a collection of invoices."""

    invoiced: float
    collected: float
    pending: float
    overdue: float


# ---------------------------------------------------------------------------
# Field coercion helpers
# ---------------------------------------------------------------------------


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Containers and other non-scalar values are not "missing".
        return False


def _as_optional_amount(value: Any) -> Optional[float]:
    """Coerce a nullable numeric field to a finite float, or None."""
    if _is_missing(value):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable amount %r ignored", value)
        return None
    if not math.isfinite(amount):
        logger.debug("Non-finite amount %r ignored", value)
        return None
    return amount


def _as_amount(value: Any) -> float:
    """Coerce a nullable numeric field to a finite float, defaulting to 0.0."""
    amount = _as_optional_amount(value)
    return 0.0 if amount is None else amount


def _as_text(value: Any, default: str = "") -> str:
    if _is_missing(value):
        return default
    text = str(value).strip()
    return text or default


def _as_optional_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def parse_record_date(value: Any, today: date) -> ParsedDate:
    """
    Parse a persisted date leniently.

    Accepted inputs:
        - ``date`` / ``datetime`` (including pandas Timestamps),
        - ``YYYY-MM-DD`` strings,
        - ISO-8601 date-time strings, with or without offset.

    The calendar date is kept as written: ``2024-01-31T23:30:00-05:00`` is
    the 31st of January, not the UTC date.

    Absent or unparseable values fall back to ``today`` with
    ``defaulted=True``.
    """
    if _is_missing(value):
        return ParsedDate(today, True)

    if isinstance(value, datetime):
        return ParsedDate(value.date(), False)
    if isinstance(value, date):
        return ParsedDate(value, False)

    text = str(value).strip()
    if _ISO_DATE_RE.match(text):
        try:
            return ParsedDate(date.fromisoformat(text), False)
        except ValueError:
            logger.debug("Invalid calendar date %r, falling back to %s", text, today)
            return ParsedDate(today, True)

    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError):
        parsed = pd.NaT

    if pd.isna(parsed):
        logger.debug("Unparseable date %r, falling back to %s", text, today)
        return ParsedDate(today, True)

    return ParsedDate(parsed.date(), False)


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


def resolve_invoice_status(
    balance: float,
    due_date: date,
    today: date,
    persisted_status: Optional[str] = None,
) -> str:
    """Resolve the lifecycle status of an invoice (see module docstring)."""
    if balance <= 0:
        computed = INVOICE_PAID
    elif due_date < today:
        computed = INVOICE_OVERDUE
    else:
        computed = INVOICE_PENDING

    persisted_label = ACCOUNTING_STATUS_TO_LABEL.get(
        _as_text(persisted_status).lower()
    )
    if persisted_label is None:
        return computed

    if balance <= 0:
        return INVOICE_PAID
    if persisted_label == INVOICE_PAID:
        return computed
    return persisted_label


def normalize_invoice_row(row: Mapping[str, Any], today: date) -> InvoiceRecord:
    """
    Build an InvoiceRecord from a raw persisted invoice row.

    Args:
        row: Mapping with the persisted invoice columns. Any column may be
            absent or None.
        today: Reference date used for the due-date comparison and as the
            fallback for missing dates.

    Returns:
        A fully populated InvoiceRecord.
    """
    amount = _as_amount(row.get("amount"))
    vat = _as_amount(row.get("vat"))

    persisted_total = _as_optional_amount(row.get("total"))
    if persisted_total is None:
        total = round_amount(amount * (1 + vat / 100))
    else:
        total = persisted_total

    paid = _as_amount(row.get("paid"))
    balance = max(round_amount(total - paid), 0.0)

    issue = parse_record_date(row.get("issue_date"), today)
    raw_due = row.get("due_date")
    if _is_missing(raw_due):
        due = issue
    else:
        due = parse_record_date(raw_due, today)

    defaulted = tuple(
        name
        for name, parsed in (("issue_date", issue), ("due_date", due))
        if parsed.defaulted
    )

    status = resolve_invoice_status(
        balance=balance,
        due_date=due.value,
        today=today,
        persisted_status=row.get("status"),
    )

    return InvoiceRecord(
        record_id=_as_text(row.get("id")),
        invoice_number=_as_text(row.get("invoice_number"), DEFAULT_INVOICE_NUMBER),
        client=_as_text(row.get("client"), DEFAULT_CLIENT),
        client_id=_as_optional_text(row.get("client_id")),
        ruc=_as_text(row.get("ruc")),
        description=_as_text(row.get("description")),
        issue_date=issue.value,
        due_date=due.value,
        amount=amount,
        vat=vat,
        total=total,
        paid=paid,
        balance=balance,
        status=status,
        payment_method=_as_optional_text(row.get("payment_method")),
        payment_reference=_as_optional_text(row.get("payment_reference")),
        payment_date=_as_optional_text(row.get("payment_date")),
        retention_ir=_as_amount(row.get("retention_ir")),
        itf=_as_amount(row.get("itf")),
        category=_as_optional_text(row.get("category")),
        defaulted_dates=defaulted,
    )


def normalize_invoice_rows(
    rows: Iterable[Mapping[str, Any]], today: date
) -> list[InvoiceRecord]:
    """Normalize a collection of raw invoice rows, preserving their order."""
    return [normalize_invoice_row(row, today) for row in rows]


def summarize_invoices(invoices: Iterable[InvoiceRecord]) -> InvoiceSummary:
    """Return invoiced, collected, pending and overdue totals."""
    invoiced = collected = pending = overdue = 0.0
    for invoice in invoices:
        invoiced += invoice.total
        collected += invoice.paid
        pending += invoice.balance
        if invoice.status == INVOICE_OVERDUE:
            overdue += invoice.balance

    return InvoiceSummary(
        invoiced=round_amount(invoiced),
        collected=round_amount(collected),
        pending=round_amount(pending),
        overdue=round_amount(overdue),
    )


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def normalize_expense_category(value: Any) -> str:
    """Return a known expense category, mapping anything else to 'otros'."""
    category = _as_text(value).lower()
    if category in EXPENSE_CATEGORIES:
        return category
    if category:
        logger.debug("Unknown expense category %r mapped to 'otros'", value)
    return "otros"


def normalize_expense_row(row: Mapping[str, Any], today: date) -> ExpenseRecord:
    """
    Build an ExpenseRecord from a raw persisted expense row.

    The total is taken from ``total_amount`` when persisted, otherwise it is
    computed as ``base + igv + other taxes - IR retention``. An expense whose
    status is ``pagado`` always has ``paid_amount == total_amount``,
    whatever partial payment value was stored.
    """
    base_amount = _as_amount(row.get("base_amount"))
    igv_amount = _as_amount(row.get("igv_amount"))
    ir_retention = _as_amount(row.get("ir_retention"))
    other_taxes = _as_amount(row.get("other_taxes"))

    persisted_total = _as_optional_amount(row.get("total_amount"))
    if persisted_total is None:
        total_amount = round_amount(
            base_amount + igv_amount + other_taxes - ir_retention
        )
    else:
        total_amount = persisted_total

    status = _as_text(row.get("status"), STATUS_PENDING).lower()
    if status not in ACCOUNTING_STATUSES:
        logger.debug("Unknown expense status %r treated as pending", status)
        status = STATUS_PENDING

    if status == STATUS_PAID:
        paid_amount = total_amount
    else:
        paid_amount = _as_amount(row.get("paid_amount"))

    document_type = _as_text(row.get("document_type"), "factura").lower()
    if document_type not in EXPENSE_DOCUMENT_TYPES:
        document_type = "factura"

    issue = parse_record_date(row.get("issue_date"), today)
    due: Optional[ParsedDate] = None
    if not _is_missing(row.get("due_date")):
        due = parse_record_date(row.get("due_date"), today)

    defaulted = ["issue_date"] if issue.defaulted else []
    if due is not None and due.defaulted:
        defaulted.append("due_date")

    return ExpenseRecord(
        id=_as_text(row.get("id")),
        document_type=document_type,
        document_series=_as_optional_text(row.get("document_series")),
        document_number=_as_text(row.get("document_number")),
        issue_date=issue.value,
        due_date=due.value if due is not None else None,
        partner_id=_as_optional_text(row.get("partner_id")),
        provider_name=_as_text(row.get("provider_name")),
        provider_document=_as_optional_text(row.get("provider_document")),
        concept=_as_text(row.get("concept")),
        base_amount=base_amount,
        igv_amount=igv_amount,
        ir_retention=ir_retention,
        other_taxes=other_taxes,
        total_amount=total_amount,
        category=normalize_expense_category(row.get("category")),
        status=status,
        paid_amount=paid_amount,
        payment_method=_as_optional_text(row.get("payment_method")),
        operation_number=_as_optional_text(row.get("operation_number")),
        payment_date=_as_optional_text(row.get("payment_date")),
        notes=_as_optional_text(row.get("notes")),
        defaulted_dates=tuple(defaulted),
    )


def normalize_expense_rows(
    rows: Iterable[Mapping[str, Any]], today: date
) -> list[ExpenseRecord]:
    """Normalize a collection of raw expense rows, preserving their order."""
    return [normalize_expense_row(row, today) for row in rows]
