"""
Domain: Catalog products.

Products are owned by the catalog collaborator; this module only models what
billing needs from them and enforces the catalog price invariant:

- Prices (purchase, regular, bulk) are non-negative decimals with at most two
  fractional digits.
- Stock quantity is a non-negative integer.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from .errors import ValidationError
from .money import require_price_format


class PriceTier(str, Enum):
    REGULAR = "regular"
    BULK = "bulk"


@dataclass(frozen=True, slots=True)
class Product:
    """
    Immutable catalog entry as seen by billing.

    `quantity` is the unit quantity currently in stock.
    """

    product_id: str
    name: str
    quantity: int
    purchase_price: Decimal
    regular_price: Decimal
    bulk_price: Decimal
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.product_id or not str(self.product_id).strip():
            raise ValidationError.single("product_id", "Product id is required")
        if not self.name or not self.name.strip():
            raise ValidationError.single("name", "Name is required")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 0:
            raise ValidationError.single("quantity", "Quantity must be a non-negative integer")
        for field_name in ("purchase_price", "regular_price", "bulk_price"):
            value = getattr(self, field_name)
            if not isinstance(value, Decimal):
                raise ValidationError.single(field_name, "must be a Decimal")
            require_price_format(field_name, value)

    def price_for(self, tier: PriceTier) -> Decimal:
        """Unit price for the requested tier."""

        if tier is PriceTier.BULK:
            return self.bulk_price
        return self.regular_price

    def in_stock(self, requested: int) -> bool:
        return requested <= self.quantity


__all__ = ["PriceTier", "Product"]
