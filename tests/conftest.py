from datetime import date

import pytest


@pytest.fixture
def today() -> date:
    return date(2024, 4, 1)


@pytest.fixture
def invoice_rows() -> list[dict]:
    """Three invoices over Q1 2024: one settled, one partially paid, one open."""
    return [
        {
            "id": "inv-001",
            "invoice_number": "F001-0001",
            "client": "Comercial Andina SAC",
            "issue_date": "2024-01-10",
            "due_date": "2024-02-09",
            "amount": 1000,
            "vat": 18,
            "total": 1180,
            "paid": 1180,
            "status": "pagado",
        },
        {
            "id": "inv-002",
            "invoice_number": "F001-0002",
            "client": "Inversiones Lima EIRL",
            "issue_date": "2024-02-12",
            "due_date": "2024-03-13",
            "amount": 2000,
            "vat": 18,
            "total": 2360,
            "paid": 1000,
            "status": "pendiente",
        },
        {
            "id": "inv-003",
            "invoice_number": "F001-0003",
            "client": "Comercial Andina SAC",
            "issue_date": "2024-03-05",
            "due_date": "2024-04-04",
            "amount": 1500,
            "vat": 18,
            "total": None,
            "paid": 0,
            "status": None,
        },
    ]


@pytest.fixture
def expense_rows() -> list[dict]:
    return [
        {
            "id": "exp-001",
            "issue_date": "2024-01-15",
            "provider_name": "Servicios Cloud SAC",
            "total_amount": 300,
            "category": "servicios",
            "status": "pagado",
        },
        {
            "id": "exp-002",
            "issue_date": "2024-02-01",
            "provider_name": "Ana Torres",
            "total_amount": 100,
            "category": "personal",
            "status": "pendiente",
        },
        {
            "id": "exp-003",
            "issue_date": "2024-03-20",
            "provider_name": "Oficina Total SRL",
            "base_amount": 84.75,
            "igv_amount": 15.25,
            "total_amount": None,
            "category": "administrativos",
            "status": "pagado",
            "paid_amount": 20,
        },
    ]
