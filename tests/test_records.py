from datetime import date, datetime

import pytest

from facturador.records import (
    DEFAULT_CLIENT,
    DEFAULT_INVOICE_NUMBER,
    INVOICE_OVERDUE,
    INVOICE_PAID,
    INVOICE_PENDING,
    normalize_expense_category,
    normalize_expense_row,
    normalize_invoice_row,
    normalize_invoice_rows,
    parse_record_date,
    resolve_invoice_status,
    summarize_invoices,
)

TODAY = date(2024, 3, 15)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-01-31", date(2024, 1, 31)),
        ("2024-01-31T23:30:00-05:00", date(2024, 1, 31)),
        ("2024-01-31T12:00:00Z", date(2024, 1, 31)),
        (date(2023, 12, 1), date(2023, 12, 1)),
        (datetime(2023, 12, 1, 18, 45), date(2023, 12, 1)),
    ],
)
def test_parse_record_date_keeps_calendar_date(raw, expected) -> None:
    parsed = parse_record_date(raw, TODAY)
    assert parsed.value == expected
    assert parsed.defaulted is False


@pytest.mark.parametrize("raw", [None, float("nan"), "not a date", "2024-02-30"])
def test_parse_record_date_falls_back_to_today(raw) -> None:
    """Absent or unparseable dates are replaced by the reference date and flagged."""
    parsed = parse_record_date(raw, TODAY)
    assert parsed.value == TODAY
    assert parsed.defaulted is True


# ---------------------------------------------------------------------------
# Invoice status
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "balance, due, persisted, expected",
    [
        # computed status only
        (0.0, date(2024, 3, 1), None, INVOICE_PAID),
        (100.0, date(2024, 3, 14), None, INVOICE_OVERDUE),
        (100.0, TODAY, None, INVOICE_PENDING),
        (100.0, date(2024, 4, 1), "desconocido", INVOICE_PENDING),
        # persisted status honoured while consistent with the balance
        (100.0, date(2024, 3, 1), "pendiente", INVOICE_PENDING),
        (100.0, date(2024, 4, 1), "vencido", INVOICE_OVERDUE),
        (100.0, date(2024, 4, 1), "PENDIENTE", INVOICE_PENDING),
        # settled invoices are always paid
        (0.0, date(2024, 4, 1), "vencido", INVOICE_PAID),
        # "pagado" with an open balance falls back to the computed status
        (100.0, date(2024, 4, 1), "pagado", INVOICE_PENDING),
        (100.0, date(2024, 3, 1), "pagado", INVOICE_OVERDUE),
    ],
)
def test_resolve_invoice_status(balance, due, persisted, expected) -> None:
    assert resolve_invoice_status(balance, due, TODAY, persisted) == expected


# ---------------------------------------------------------------------------
# Invoice normalization
# ---------------------------------------------------------------------------


def test_normalize_invoice_computes_total_from_amount_and_vat() -> None:
    row = {
        "id": "inv-1",
        "invoice_number": "F001-0001",
        "client": "Comercial Andina SAC",
        "issue_date": "2024-03-01",
        "due_date": "2024-03-31",
        "amount": 1000,
        "vat": 18,
        "paid": 200,
    }
    invoice = normalize_invoice_row(row, TODAY)

    assert invoice.total == pytest.approx(1180.0)
    assert invoice.balance == pytest.approx(980.0)
    assert invoice.status == INVOICE_PENDING
    assert invoice.defaulted_dates == ()


def test_normalize_invoice_prefers_persisted_total() -> None:
    row = {"issue_date": "2024-03-01", "amount": 1000, "vat": 18, "total": 500}
    invoice = normalize_invoice_row(row, TODAY)
    assert invoice.total == pytest.approx(500.0)


def test_normalize_invoice_balance_is_never_negative() -> None:
    row = {"issue_date": "2024-03-01", "total": 100, "paid": 150}
    invoice = normalize_invoice_row(row, TODAY)
    assert invoice.balance == 0.0
    assert invoice.status == INVOICE_PAID


def test_normalize_invoice_due_date_defaults_to_issue_date() -> None:
    row = {"issue_date": "2024-03-01", "total": 100}
    invoice = normalize_invoice_row(row, TODAY)

    assert invoice.due_date == date(2024, 3, 1)
    assert invoice.status == INVOICE_OVERDUE


def test_normalize_invoice_with_empty_row() -> None:
    """A row with every field missing still yields a usable record."""
    invoice = normalize_invoice_row({}, TODAY)

    assert invoice.invoice_number == DEFAULT_INVOICE_NUMBER
    assert invoice.client == DEFAULT_CLIENT
    assert invoice.issue_date == TODAY
    assert invoice.due_date == TODAY
    assert invoice.total == 0.0
    assert invoice.balance == 0.0
    assert invoice.status == INVOICE_PAID
    assert invoice.defaulted_dates == ("issue_date", "due_date")


def test_normalize_invoice_ignores_unparseable_amounts() -> None:
    row = {"issue_date": "2024-03-01", "amount": "abc", "vat": None, "total": ""}
    invoice = normalize_invoice_row(row, TODAY)
    assert invoice.amount == 0.0
    assert invoice.total == 0.0


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf", "NaN", float("inf")])
def test_non_finite_amounts_become_zero(raw) -> None:
    invoice = normalize_invoice_row(
        {"issue_date": "2024-03-01", "amount": raw, "total": raw, "paid": raw}, TODAY
    )
    assert invoice.amount == 0.0
    assert invoice.total == 0.0
    assert invoice.paid == 0.0
    assert invoice.balance == 0.0
    assert invoice.status == INVOICE_PAID

    expense = normalize_expense_row(
        {"issue_date": "2024-03-01", "base_amount": 100, "total_amount": raw}, TODAY
    )
    # a non-finite persisted total is ignored and recomputed
    assert expense.total_amount == pytest.approx(100.0)


def test_summarize_invoices() -> None:
    rows = [
        {"issue_date": "2024-01-10", "total": 1180, "paid": 1180},
        {"issue_date": "2024-02-10", "due_date": "2024-03-01", "total": 500, "paid": 100},
        {"issue_date": "2024-03-10", "due_date": "2024-04-10", "total": 300, "paid": 0},
    ]
    summary = summarize_invoices(normalize_invoice_rows(rows, TODAY))

    assert summary.invoiced == pytest.approx(1980.0)
    assert summary.collected == pytest.approx(1280.0)
    assert summary.pending == pytest.approx(700.0)
    # Only the balance of the overdue invoice counts as overdue.
    assert summary.overdue == pytest.approx(400.0)


def test_summarize_pending_is_sum_of_positive_differences() -> None:
    rows = [
        {"issue_date": "2024-03-01", "total": 100, "paid": 30},
        {"issue_date": "2024-03-01", "total": 50, "paid": 80},
        {"issue_date": "2024-03-01", "total": 20.5, "paid": 0},
    ]
    invoices = normalize_invoice_rows(rows, TODAY)
    summary = summarize_invoices(invoices)

    expected = sum(max(i.total - i.paid, 0.0) for i in invoices)
    assert summary.pending == pytest.approx(expected)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def test_normalize_expense_computes_total() -> None:
    row = {
        "issue_date": "2024-03-01",
        "base_amount": 100,
        "igv_amount": 18,
        "other_taxes": 2,
        "ir_retention": 8,
        "category": "servicios",
    }
    expense = normalize_expense_row(row, TODAY)

    assert expense.total_amount == pytest.approx(112.0)
    assert expense.status == "pendiente"
    assert expense.paid_amount == 0.0
    assert expense.document_type == "factura"
    assert expense.due_date is None
    assert expense.defaulted_dates == ()


def test_paid_expense_is_fully_paid() -> None:
    row = {
        "issue_date": "2024-03-01",
        "total_amount": 250,
        "status": "pagado",
        "paid_amount": 20,
    }
    expense = normalize_expense_row(row, TODAY)
    assert expense.paid_amount == pytest.approx(250.0)


def test_unknown_expense_status_is_pending() -> None:
    row = {"issue_date": "2024-03-01", "total_amount": 10, "status": "anulado"}
    assert normalize_expense_row(row, TODAY).status == "pendiente"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("personal", "personal"),
        ("Marketing", "marketing"),
        ("viajes", "otros"),
        (None, "otros"),
        ("", "otros"),
    ],
)
def test_normalize_expense_category(raw, expected) -> None:
    assert normalize_expense_category(raw) == expected


def test_expense_defaulted_dates() -> None:
    row = {"issue_date": None, "due_date": "mañana", "total_amount": 10}
    expense = normalize_expense_row(row, TODAY)

    assert expense.issue_date == TODAY
    assert expense.due_date == TODAY
    assert expense.defaulted_dates == ("issue_date", "due_date")
