"""
Pytest configuration and fixtures for BIR compliance tests.
"""

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

sys.path.insert(0, str(PROJECT_ROOT / "python"))


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def sample_sale() -> dict:
    """Return a cash sale as recorded by the POS module."""
    return {
        "id": "sale-1",
        "invoiceNumber": "INV-2024-0001",
        "customerId": "customer-1",
        "items": [
            {"productId": "1", "productName": "Product 1", "quantity": 1, "price": 1000, "total": 1000},
        ],
        "subtotal": 1000,
        "tax": 120,
        "total": 1120,
        "paymentMethod": "cash",
        "status": "completed",
        "createdAt": datetime(2024, 1, 15, 10, 30),
        "createdBy": "user-1",
    }


@pytest.fixture
def january_sales() -> list[dict]:
    """Return sales spread over January and February 2024."""
    return [
        {
            "id": "sale-1",
            "subtotal": 1000,
            "tax": 120,
            "total": 1120,
            "payment_method": "cash",
            "created_at": "2024-01-05T09:00:00",
        },
        {
            "id": "sale-2",
            "subtotal": 500,
            "tax": 60,
            "total": 560,
            "payment_method": "card",
            "created_at": "2024-01-31T23:59:00Z",
        },
        {
            "id": "sale-3",
            "subtotal": 300,
            "tax": 0,
            "total": 300,
            "payment_method": "cash",
            "created_at": "2024-01-20T12:00:00",
            "vat_treatment": "exempt",
        },
        {
            "id": "sale-4",
            "subtotal": 2000,
            "tax": 240,
            "total": 2240,
            "payment_method": "cash",
            "created_at": "2024-02-01T08:00:00",
        },
    ]


@pytest.fixture
def sample_employee() -> dict:
    """Return an HR employee record."""
    return {
        "id": "emp-1",
        "employeeId": "EMP-001",
        "firstName": "Juan",
        "lastName": "Dela Cruz",
        "middleName": "Santos",
        "basicSalary": 25000,
        "tinNumber": "123-456-789-001",
    }


@pytest.fixture
def valid_receipt() -> dict:
    """Return a receipt that satisfies every BIR check."""
    return {
        "orNumber": "1234567890",
        "tin": "123-456-789-001",
        "businessName": "Test Business Inc.",
        "businessAddress": "Test Address, Manila",
        "date": datetime(2024, 1, 15),
        "items": [
            {"description": "Test Product", "quantity": 2, "unitPrice": 100, "amount": 200},
        ],
        "vatableAmount": 200,
        "vatAmount": 24,
        "totalAmount": 224,
        "customerName": "Juan Dela Cruz",
        "customerTIN": "987-654-321-001",
    }


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ.setdefault("POSTGRES_HOST", "localhost")
    os.environ.setdefault("POSTGRES_PORT", "5432")
    os.environ.setdefault("POSTGRES_DB", "fbms_test")
    os.environ.setdefault("POSTGRES_USER", "test")
    os.environ.setdefault("POSTGRES_PASSWORD", "test")
    yield
