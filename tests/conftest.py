"""
Pytest configuration for billing tests.

This file adds the parent directory to the Python path so that tests
can import from the domain, services, and repositories packages, and
provides catalog fixtures plus in-memory sale stores.
"""

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Dict, List

import pytest

# Add the project root to the Python path
# so tests can import domain, services, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.errors import PersistenceError  # noqa: E402
from domain.product import Product  # noqa: E402
from domain.sale import SaleRecord  # noqa: E402


class InMemorySaleStore:
    """SaleStore that keeps records in a dict and numbers invoices sequentially."""

    def __init__(self) -> None:
        self.records: Dict[str, SaleRecord] = {}
        self.calls: List[str] = []
        self._next = 1

    def create_sale(self, record: SaleRecord) -> SaleRecord:
        self.calls.append("create")
        sale_id = f"sale-{self._next}"
        invoice_number = f"INV-{self._next:04d}"
        self._next += 1
        stored = record.persisted(
            sale_id=sale_id,
            invoice_number=invoice_number,
            created_at=datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
        )
        self.records[sale_id] = stored
        return stored

    def update_sale(self, record: SaleRecord) -> SaleRecord:
        self.calls.append("update")
        if record.sale_id not in self.records:
            raise PersistenceError(f"sale {record.sale_id} not found")
        previous = self.records[record.sale_id]
        stored = record.persisted(
            sale_id=record.sale_id,
            invoice_number=previous.invoice_number,
            created_at=previous.created_at,
        )
        self.records[record.sale_id] = stored
        return stored


class FailingSaleStore:
    """SaleStore whose every call fails like a network/server error."""

    def __init__(self, message: str = "503: Service Unavailable") -> None:
        self.message = message
        self.calls: List[str] = []

    def create_sale(self, record: SaleRecord) -> SaleRecord:
        self.calls.append("create")
        raise PersistenceError(self.message)

    def update_sale(self, record: SaleRecord) -> SaleRecord:
        self.calls.append("update")
        raise PersistenceError(self.message)


@pytest.fixture
def product_a() -> Product:
    return Product(
        product_id="prod-a",
        name="Ceiling Fan",
        quantity=50,
        purchase_price=Decimal("70.00"),
        regular_price=Decimal("100.00"),
        bulk_price=Decimal("80.00"),
    )


@pytest.fixture
def product_b() -> Product:
    return Product(
        product_id="prod-b",
        name="LED Bulb 9W",
        quantity=5,
        purchase_price=Decimal("45.50"),
        regular_price=Decimal("60.25"),
        bulk_price=Decimal("55.00"),
    )


@pytest.fixture
def store() -> InMemorySaleStore:
    return InMemorySaleStore()


@pytest.fixture
def failing_store() -> FailingSaleStore:
    return FailingSaleStore()
