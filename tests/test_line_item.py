"""
Tests for `domain/line_item.py`.

Covers contract rules:
- Line total equals round_half_up(quantity * unit_price, 2).
- Default price is regular; bulk tier and manual override are honoured.
- Quantity < 1 and negative prices raise ValidationError.
- Exceeding stock is flagged, not clamped.
- Shortages are summed per product across lines.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from decimal import ROUND_HALF_UP, Decimal

import pytest

from domain.errors import ValidationError
from domain.line_item import LineItem, resolve_line_item, stock_shortages
from domain.product import PriceTier


def test_regular_price_is_default(product_a) -> None:
    """Verify an unqualified selection uses the regular price (3 x 100 = 300)."""

    item = resolve_line_item(product_a, 3)

    assert item.unit_price == Decimal("100.00")
    assert item.total == Decimal("300.00")
    assert item.tier is PriceTier.REGULAR
    assert item.price_overridden is False
    assert item.product_id == "prod-a"
    assert item.product_name == "Ceiling Fan"


def test_bulk_tier_uses_bulk_price(product_a) -> None:
    """Verify the bulk tier prices 10 units at 80 each (800)."""

    item = resolve_line_item(product_a, 10, tier=PriceTier.BULK)

    assert item.unit_price == Decimal("80.00")
    assert item.total == Decimal("800.00")


def test_manual_override_wins_over_tier(product_a) -> None:
    """Verify a manually edited price replaces the tier price."""

    item = resolve_line_item(product_a, 2, Decimal("95.50"), tier=PriceTier.BULK)

    assert item.unit_price == Decimal("95.50")
    assert item.total == Decimal("191.00")
    assert item.price_overridden is True


def test_float_override_is_converted_without_drift(product_a) -> None:
    """Verify float input is taken at face value, not its binary expansion."""

    item = resolve_line_item(product_a, 3, 0.1)

    assert item.unit_price == Decimal("0.1")
    assert item.total == Decimal("0.30")


@pytest.mark.parametrize(
    "quantity, price",
    [
        (1, "0"),
        (1, "0.005"),
        (3, "33.333"),
        (7, "19.995"),
        (12, "1.125"),
        (250, "0.01"),
    ],
)
def test_total_is_rounded_half_up_to_cents(product_a, quantity: int, price: str) -> None:
    """Verify total == round_half_up(q * p, 2) for assorted quantities and prices."""

    item = resolve_line_item(product_a, quantity, Decimal(price))
    expected = (quantity * Decimal(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    assert item.total == expected


def test_total_is_derived_on_read() -> None:
    """Verify the total is always recomputed from quantity and unit price."""

    item = LineItem(product_id="p", quantity=4, unit_price=Decimal("2.50"))

    assert item.total == Decimal("10.00")
    with pytest.raises(FrozenInstanceError):
        item.quantity = 5  # type: ignore[misc]


@pytest.mark.parametrize("quantity", [0, -1])
def test_quantity_below_one_is_rejected(product_a, quantity: int) -> None:
    """Verify quantity < 1 raises ValidationError keyed on quantity."""

    with pytest.raises(ValidationError) as excinfo:
        resolve_line_item(product_a, quantity)

    assert "quantity" in excinfo.value.errors


@pytest.mark.parametrize("quantity", [1.5, "3", True, None])
def test_non_integer_quantity_is_rejected(product_a, quantity) -> None:
    """Verify quantities must be real integers (no floats, strings or bools)."""

    with pytest.raises(ValidationError):
        resolve_line_item(product_a, quantity)


def test_negative_unit_price_is_rejected(product_a) -> None:
    """Verify a negative manual price raises ValidationError."""

    with pytest.raises(ValidationError) as excinfo:
        resolve_line_item(product_a, 1, Decimal("-0.01"))

    assert "unit_price" in excinfo.value.errors


def test_non_numeric_unit_price_is_rejected(product_a) -> None:
    """Verify a garbage price string raises ValidationError."""

    with pytest.raises(ValidationError):
        resolve_line_item(product_a, 1, "abc")


def test_insufficient_stock_is_flagged_not_clamped(product_b) -> None:
    """Verify requesting more than stock keeps the quantity and raises the flag."""

    item = resolve_line_item(product_b, 8)

    assert item.quantity == 8
    assert item.available_stock == 5
    assert item.insufficient_stock is True
    assert item.total == Decimal("482.00")


def test_stock_within_limit_is_not_flagged(product_b) -> None:
    """Verify requesting exactly the available stock is fine."""

    assert resolve_line_item(product_b, 5).insufficient_stock is False


def test_stock_shortages_sum_quantities_per_product(product_a, product_b) -> None:
    """Verify the same product split over two rows is checked against stock once."""

    items = [
        resolve_line_item(product_b, 3),
        resolve_line_item(product_a, 1),
        resolve_line_item(product_b, 4, tier=PriceTier.BULK),
    ]

    shortages = stock_shortages(items)

    assert len(shortages) == 1
    assert shortages[0].product_id == "prod-b"
    assert shortages[0].requested == 7
    assert shortages[0].available == 5
    assert shortages[0].shortage == 2


def test_stock_shortages_ignore_items_without_snapshot() -> None:
    """Verify items reloaded from storage (no stock snapshot) never warn."""

    items = [LineItem(product_id="p", quantity=1000, unit_price=Decimal("1.00"))]

    assert stock_shortages(items) == []
