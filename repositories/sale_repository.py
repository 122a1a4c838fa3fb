"""
Sale repository (persistence).

This module provides *only* persistence operations for the SaleRecord domain
entity, backed by a Supabase (PostgREST) table. It does not enforce business
rules (totals, status, stock); it only inserts, updates and fetches records.

New sales are inserted (POST). The database assigns `id`, `invoice_number`
and `created_at`, and the inserted row is read back. Edited sales are updated
in place (PATCH) by id; their invoice number is never re-requested.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from pydantic import ValidationError as SchemaError
from supabase import Client  # type: ignore[import-not-found]

from domain.errors import PersistenceError
from domain.sale import SaleRecord
from repositories.client import execute_query
from repositories.schemas import SalePayload, SaleRow

# Supabase table name for sale records.
# Keep this aligned with your database schema.
_SALES_TABLE: str = "sales"


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """Convert a Supabase row into a SaleRecord."""

    try:
        return SaleRow.model_validate(row).to_domain()
    except (SchemaError, ValueError) as e:
        raise PersistenceError(f"Malformed sale row: {e}") from e


class SupabaseSaleStore:
    """
    SaleStore implementation over the Supabase `sales` table.

    Example:
        store = SupabaseSaleStore(create_supabase_client())
        result = submit_sale(record, store)
    """

    def __init__(self, client: Client, table: str = _SALES_TABLE) -> None:
        self._client = client
        self._table = table

    def create_sale(self, record: SaleRecord) -> SaleRecord:
        """
        Insert a new sale.

        Returns:
            The record with server-assigned sale_id, invoice_number and created_at

        Raises:
            PersistenceError: If the insert fails or returns no usable row
        """
        if record.is_update:
            raise PersistenceError("Refusing to insert a sale that already has an id; use update_sale")

        payload = SalePayload.from_record(record).model_dump(mode="json")
        rows = execute_query(self._client.table(self._table).insert(payload), "record sale")

        if not rows:
            raise PersistenceError("Failed to record sale: insert returned no row")

        stored = _row_to_sale(rows[0])
        return record.persisted(
            sale_id=stored.sale_id or "",
            invoice_number=stored.invoice_number,
            created_at=stored.created_at,
        )

    def update_sale(self, record: SaleRecord) -> SaleRecord:
        """
        Update an existing sale in place, keyed by record.sale_id.

        Raises:
            PersistenceError: If the sale does not exist or the update fails
        """
        if record.sale_id is None:
            raise PersistenceError("Cannot update a sale without an id")

        payload = SalePayload.from_record(record).model_dump(mode="json")
        rows = execute_query(
            self._client.table(self._table).update(payload).eq("id", record.sale_id),
            "update sale",
        )

        if not rows:
            raise PersistenceError(f"Failed to update sale: sale {record.sale_id} not found")

        stored = _row_to_sale(rows[0])
        return record.persisted(
            sale_id=record.sale_id,
            invoice_number=stored.invoice_number,
            created_at=stored.created_at,
        )

    def get_sale(self, sale_id: str) -> Optional[SaleRecord]:
        """
        Retrieve a single sale record by its ID.

        Returns:
            SaleRecord or None if not found
        """
        rows = execute_query(
            self._client.table(self._table).select("*").eq("id", sale_id).limit(1),
            "get sale",
        )
        if not rows:
            return None
        return _row_to_sale(rows[0])

    def list_sales_by_buyer(self, buyer_id: str) -> List[SaleRecord]:
        """
        Retrieve all sales for a buyer, most recent sale date first.

        Returns:
            List[SaleRecord] (possibly empty)
        """
        rows = execute_query(
            self._client.table(self._table)
            .select("*")
            .eq("buyer_id", buyer_id)
            .order("sale_date", desc=True),
            "list sales",
        )
        return [_row_to_sale(row) for row in rows]


__all__ = ["SupabaseSaleStore"]
