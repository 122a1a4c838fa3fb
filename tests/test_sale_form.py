"""
Tests for `services/sale_form.py`.

Covers contract rules:
- Totals follow every quantity / price edit immediately.
- Selecting a product resets the row to quantity 1 at the regular price.
- Failed submissions return to editing and keep all inputs.
- Re-entrant submission is refused while one is in flight.
- A persisted or re-opened sale is updated in place on the next submit.
- Bulk pricing is gated by role.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from domain.bill import SaleStatus
from domain.errors import PersistenceError, ValidationError
from domain.product import PriceTier
from services.pricing_service import UserRole
from services.sale_form import FormState, SaleForm

SALE_DAY = date(2025, 1, 15)


def _filled_form(product_a, product_b, **kwargs) -> SaleForm:
    form = SaleForm([product_a, product_b], sale_date=SALE_DAY, **kwargs)
    form.set_buyer("buyer-1")
    form.select_product(0, "prod-a")
    form.set_quantity(0, 3)
    index = form.add_line()
    form.select_product(index, "prod-a")
    form.set_quantity(index, 10)
    form.select_tier(index, PriceTier.BULK)
    return form


def test_new_form_starts_editing_with_one_blank_row(product_a) -> None:
    """Verify a fresh form mirrors the empty bill: one blank row, nothing paid."""

    form = SaleForm([product_a])

    assert form.state is FormState.EDITING
    assert len(form.lines) == 1
    assert form.lines[0].product_id is None
    preview = form.preview()
    assert preview.grand_total == Decimal("0")
    assert preview.line_errors == {"line_items[0].product_id": "Product is required"}


def test_preview_follows_edits(product_a, product_b) -> None:
    """Verify totals recompute synchronously on every edit."""

    form = _filled_form(product_a, product_b)
    form.set_amount_paid(Decimal("500"))

    preview = form.preview()
    assert preview.grand_total == Decimal("1100.00")
    assert preview.amount_due == Decimal("600.00")
    assert preview.status is SaleStatus.DUE

    form.set_quantity(0, 4)
    assert form.preview().grand_total == Decimal("1200.00")

    form.set_unit_price(1, Decimal("75"))
    assert form.preview().grand_total == Decimal("1150.00")


def test_select_product_resets_row(product_a, product_b) -> None:
    """Verify picking a product resets quantity and drops manual prices."""

    form = SaleForm([product_a, product_b], sale_date=SALE_DAY)
    form.select_product(0, "prod-a")
    form.set_quantity(0, 9)
    form.set_unit_price(0, "12.00")

    form.select_product(0, "prod-b")

    item = form.line_items()[0]
    assert item.product_id == "prod-b"
    assert item.quantity == 1
    assert item.unit_price == Decimal("60.25")
    assert item.price_overridden is False


def test_invalid_rows_are_reported_per_field(product_a) -> None:
    """Verify bad row inputs surface as inline field errors."""

    form = SaleForm([product_a], sale_date=SALE_DAY)
    form.select_product(0, "prod-a")
    form.set_quantity(0, 0)

    preview = form.preview()

    assert preview.line_items == ()
    assert preview.line_errors == {"line_items[0].quantity": "Quantity must be at least 1"}


def test_invalid_amount_paid_hides_due(product_a, product_b) -> None:
    """Verify an unparseable amount paid leaves due and status unset."""

    form = _filled_form(product_a, product_b)
    form.set_amount_paid("abc")

    preview = form.preview()

    assert preview.grand_total == Decimal("1100.00")
    assert preview.amount_due is None
    assert preview.status is None


def test_submit_persists_and_remembers_identity(product_a, product_b, store) -> None:
    """Verify a successful submit lands in persisted with the server identity."""

    form = _filled_form(product_a, product_b)
    form.set_amount_paid(Decimal("1100"))

    result = form.submit(store)

    assert result.success is True
    assert form.state is FormState.PERSISTED
    assert form.sale_id == "sale-1"
    assert form.invoice_number == "INV-0001"
    assert form.last_error is None
    assert store.records["sale-1"].status is SaleStatus.COMPLETED


def test_edit_after_persist_resubmits_as_update(product_a, product_b, store) -> None:
    """Verify editing a persisted form updates the same sale on the next submit."""

    form = _filled_form(product_a, product_b)
    form.submit(store)

    form.set_amount_paid(Decimal("200"))
    assert form.state is FormState.EDITING
    form.submit(store)

    assert store.calls == ["create", "update"]
    assert form.sale_id == "sale-1"
    assert form.invoice_number == "INV-0001"
    assert store.records["sale-1"].amount_paid == Decimal("200")


def test_failed_submit_returns_to_editing_with_inputs(product_a, product_b, failing_store) -> None:
    """Verify a persistence failure keeps every input so the user can retry."""

    form = _filled_form(product_a, product_b)
    form.set_amount_paid(Decimal("500"))

    result = form.submit(failing_store)

    assert result.success is False
    assert form.state is FormState.EDITING
    assert isinstance(form.last_error, PersistenceError)
    assert form.buyer_id == "buyer-1"
    assert form.amount_paid == Decimal("500")
    assert form.preview().grand_total == Decimal("1100.00")
    assert form.sale_id is None


def test_row_errors_block_submission_without_store_call(product_a, store) -> None:
    """Verify a row with no product fails locally."""

    form = SaleForm([product_a], sale_date=SALE_DAY)
    form.set_buyer("buyer-1")

    result = form.submit(store)

    assert isinstance(result.error, ValidationError)
    assert "line_items[0].product_id" in result.error.errors
    assert store.calls == []
    assert form.state is FormState.EDITING


def test_removing_every_row_fails_validation(product_a, store) -> None:
    """Verify a form with no rows cannot be submitted."""

    form = SaleForm([product_a], sale_date=SALE_DAY)
    form.set_buyer("buyer-1")
    form.remove_line(0)

    result = form.submit(store)

    assert isinstance(result.error, ValidationError)
    assert "line_items" in result.error.errors
    assert store.calls == []


def test_reentrant_submit_is_refused(product_a, product_b, store) -> None:
    """Verify a second submit while one is in flight raises."""

    form = _filled_form(product_a, product_b)
    seen = {}

    class ReentrantStore:
        def create_sale(self, record):
            seen["state"] = form.state
            with pytest.raises(RuntimeError):
                form.submit(store)
            with pytest.raises(RuntimeError):
                form.set_amount_paid(Decimal("1"))
            return store.create_sale(record)

        def update_sale(self, record):
            return store.update_sale(record)

    result = form.submit(ReentrantStore())

    assert seen["state"] is FormState.SUBMITTING
    assert result.success is True
    assert store.calls == ["create"]


def test_unexpected_store_exception_resets_state(product_a, product_b) -> None:
    """Verify the form never stays stuck in submitting."""

    form = _filled_form(product_a, product_b)

    class BrokenStore:
        def create_sale(self, record):
            raise KeyError("boom")

        def update_sale(self, record):
            raise KeyError("boom")

    with pytest.raises(KeyError):
        form.submit(BrokenStore())

    assert form.state is FormState.EDITING


def test_reopened_sale_updates_in_place(product_a, product_b, store) -> None:
    """Verify a sale re-opened from its record keeps id, invoice and prices."""

    original = _filled_form(product_a, product_b)
    original.submit(store)
    record = store.records["sale-1"]

    form = SaleForm.from_record(record, [product_a, product_b])

    assert form.state is FormState.PERSISTED
    assert form.buyer_id == "buyer-1"
    assert form.preview().grand_total == Decimal("1100.00")
    assert form.line_items()[1].tier is PriceTier.BULK
    assert form.line_items()[1].price_overridden is False

    form.set_amount_paid(Decimal("1100"))
    result = form.submit(store)

    assert result.success is True
    assert store.calls == ["create", "update"]
    assert store.records["sale-1"].status is SaleStatus.COMPLETED
    assert store.records["sale-1"].invoice_number == "INV-0001"


def test_bulk_tier_is_refused_for_technicians(product_a) -> None:
    """Verify technicians cannot sell at the bulk price."""

    form = SaleForm([product_a], role=UserRole.TECHNICIAN, sale_date=SALE_DAY)
    form.select_product(0, "prod-a")

    with pytest.raises(ValidationError):
        form.select_tier(0, PriceTier.BULK)

    assert form.line_items()[0].unit_price == Decimal("100.00")


def test_stock_warnings_appear_in_preview(product_b) -> None:
    """Verify exceeding stock is surfaced while editing."""

    form = SaleForm([product_b], sale_date=SALE_DAY)
    form.select_product(0, "prod-b")
    form.set_quantity(0, 6)

    warnings = form.preview().stock_warnings

    assert len(warnings) == 1
    assert warnings[0].available == 5
