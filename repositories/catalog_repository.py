"""
Catalog repository for reading products and buyers.

Both lists are fetched in full (not paginated), the way the sale form loads
them before a bill is started.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as SchemaError
from supabase import Client  # type: ignore[import-not-found]

from domain.buyer import Buyer
from domain.errors import PersistenceError, ValidationError
from domain.product import Product
from repositories.client import execute_query
from repositories.schemas import BuyerRow, ProductRow

_PRODUCTS_TABLE: str = "products"
_BUYERS_TABLE: str = "buyers"


def _row_to_product(row: Mapping[str, Any]) -> Product:
    try:
        return ProductRow.model_validate(row).to_domain()
    except (SchemaError, ValidationError) as e:
        raise PersistenceError(f"Malformed product row: {e}") from e


def _row_to_buyer(row: Mapping[str, Any]) -> Buyer:
    try:
        return BuyerRow.model_validate(row).to_domain()
    except SchemaError as e:
        raise PersistenceError(f"Malformed buyer row: {e}") from e


class SupabaseCatalog:
    """Read-only access to the products and buyers tables."""

    def __init__(
        self,
        client: Client,
        products_table: str = _PRODUCTS_TABLE,
        buyers_table: str = _BUYERS_TABLE,
    ) -> None:
        self._client = client
        self._products_table = products_table
        self._buyers_table = buyers_table

    def list_products(self) -> List[Product]:
        rows = execute_query(
            self._client.table(self._products_table).select("*").order("name"),
            "list products",
        )
        return [_row_to_product(row) for row in rows]

    def get_product(self, product_id: str) -> Optional[Product]:
        rows = execute_query(
            self._client.table(self._products_table).select("*").eq("id", product_id).limit(1),
            "get product",
        )
        if not rows:
            return None
        return _row_to_product(rows[0])

    def list_buyers(self) -> List[Buyer]:
        """Buyers with their town name embedded (PostgREST resource embedding)."""
        rows = execute_query(
            self._client.table(self._buyers_table).select("*, town:towns(name)").order("name"),
            "list buyers",
        )
        return [_row_to_buyer(row) for row in rows]


__all__ = ["SupabaseCatalog"]
