"""
Dashboard service.

Summarises the product catalog for the owner dashboard:
- total number of products
- number of products whose stock is below the low-stock threshold
- total inventory value at purchase cost (sum of purchase_price * stock)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from domain.money import ZERO, round_money
from domain.product import Product
from services.billing_config import BillingConfig


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    total_products: int
    low_stock_items: int
    total_inventory_value: Decimal


def low_stock_products(products: Iterable[Product], threshold: int) -> List[Product]:
    return [product for product in products if product.quantity < threshold]


def compute_dashboard_metrics(
    products: Iterable[Product],
    *,
    config: Optional[BillingConfig] = None,
) -> DashboardMetrics:
    config = config or BillingConfig()
    catalog = list(products)

    inventory_value = ZERO
    for product in catalog:
        inventory_value += product.purchase_price * product.quantity

    return DashboardMetrics(
        total_products=len(catalog),
        low_stock_items=len(low_stock_products(catalog, config.low_stock_threshold)),
        total_inventory_value=round_money(inventory_value),
    )


__all__ = ["DashboardMetrics", "low_stock_products", "compute_dashboard_metrics"]
