"""
Domain: Sale line items and the line item resolver.

Rules implemented here:
- A line item references a product id, carries an integer quantity >= 1 and a
  Decimal unit price >= 0.
- The line total is derived: round_half_up(quantity * unit_price, 2). It is a
  property, so it is recomputed on every read and can never go stale.
- Default unit price is the product's regular price; callers may pick the bulk
  tier or supply a manual override.
- Requesting more than is in stock still produces a line item; the shortage is
  flagged, never clamped.

This module is pure: no I/O, no configuration lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .errors import StockError, ValidationError
from .money import require_non_negative, round_money, to_decimal
from .product import PriceTier, Product


def _require_quantity(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError.single(name, "Quantity must be a whole number")
    if value < 1:
        raise ValidationError.single(name, "Quantity must be at least 1")
    return value


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One product + quantity + price entry within a sale.

    `available_stock` is a snapshot of the product stock at resolution time and
    is only used to flag shortages. `price_overridden` is True when the unit
    price was typed in by hand instead of taken from a tier.
    """

    product_id: str
    quantity: int
    unit_price: Decimal
    product_name: Optional[str] = None
    tier: PriceTier = PriceTier.REGULAR
    price_overridden: bool = False
    available_stock: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.product_id or not str(self.product_id).strip():
            raise ValidationError.single("product_id", "Product is required")
        _require_quantity("quantity", self.quantity)
        if not isinstance(self.unit_price, Decimal):
            raise ValidationError.single("unit_price", "must be a Decimal")
        require_non_negative("unit_price", self.unit_price)

    @property
    def total(self) -> Decimal:
        return round_money(self.quantity * self.unit_price)

    @property
    def insufficient_stock(self) -> bool:
        return self.available_stock is not None and self.quantity > self.available_stock


def resolve_line_item(
    product: Product,
    quantity: int,
    unit_price_override: Optional[Any] = None,
    *,
    tier: PriceTier = PriceTier.REGULAR,
) -> LineItem:
    """
    Price a product selection.

    Args:
        product: Catalog product being sold
        quantity: Units requested (integer >= 1)
        unit_price_override: Manually edited unit price; wins over `tier`
        tier: Price tier to use when no override is given

    Returns:
        LineItem with total = round_half_up(quantity * unit_price, 2)

    Raises:
        ValidationError: If quantity < 1 or the unit price is negative

    Example:
        item = resolve_line_item(product, 10, tier=PriceTier.BULK)
        # product.bulk_price == Decimal("80.00") -> item.total == Decimal("800.00")
    """
    _require_quantity("quantity", quantity)

    if unit_price_override is not None:
        unit_price = to_decimal("unit_price", unit_price_override)
        overridden = True
    else:
        unit_price = product.price_for(tier)
        overridden = False

    return LineItem(
        product_id=product.product_id,
        quantity=quantity,
        unit_price=unit_price,
        product_name=product.name,
        tier=tier,
        price_overridden=overridden,
        available_stock=product.quantity,
    )


def stock_shortages(line_items: Iterable[LineItem]) -> List[StockError]:
    """
    Report every product whose requested quantity exceeds its stock.

    Quantities are summed per product across lines, so the same product split
    over two rows is checked against stock once. Items without a stock
    snapshot are ignored.
    """
    requested: Dict[str, int] = {}
    available: Dict[str, int] = {}
    names: Dict[str, Optional[str]] = {}

    for item in line_items:
        if item.available_stock is None:
            continue
        requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
        available[item.product_id] = item.available_stock
        names.setdefault(item.product_id, item.product_name)

    return [
        StockError(product_id, qty, available[product_id], names[product_id])
        for product_id, qty in requested.items()
        if qty > available[product_id]
    ]


__all__ = ["LineItem", "resolve_line_item", "stock_shortages"]
