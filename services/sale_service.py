"""
Sale service for submitting bills to the persistence collaborator.

Handles:
- Building a validated SaleRecord from form inputs
- Stock policy (warn by default, optionally block)
- Create vs. update dispatch (new sales are inserted, edited sales are updated
  in place under their existing id and invoice number)
- Converting failures into an explicit SaleSubmissionResult

No retries: every failure is terminal for that attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, List, Optional, Protocol, Union

from domain.errors import PersistenceError, StockError, ValidationError
from domain.line_item import LineItem, stock_shortages
from domain.sale import SaleRecord, build_sale_record
from services.billing_config import BillingConfig

logger = logging.getLogger(__name__)

SubmissionError = Union[ValidationError, StockError, PersistenceError]


class SaleStore(Protocol):
    """
    Persistence collaborator for sale records.

    create_sale inserts a new record and returns it with the server-assigned
    sale_id and invoice_number. update_sale replaces an existing record in
    place, keyed by record.sale_id. Both raise PersistenceError on failure.
    """

    def create_sale(self, record: SaleRecord) -> SaleRecord: ...

    def update_sale(self, record: SaleRecord) -> SaleRecord: ...


@dataclass(frozen=True, slots=True)
class SaleSubmissionResult:
    """
    Result of a submission attempt.

    success: True if the record was persisted
    sale: Persisted record on success, None otherwise
    error: Why the attempt failed (None if success=True)
    warnings: Non-blocking stock shortages detected for this sale
    """
    success: bool
    sale: Optional[SaleRecord] = None
    error: Optional[SubmissionError] = None
    warnings: List[StockError] = field(default_factory=list)

    @classmethod
    def failed(cls, error: SubmissionError, warnings: Optional[List[StockError]] = None) -> "SaleSubmissionResult":
        return cls(success=False, sale=None, error=error, warnings=list(warnings or []))


def submit_sale(
    record: SaleRecord,
    store: SaleStore,
    *,
    config: Optional[BillingConfig] = None,
) -> SaleSubmissionResult:
    """
    Hand a built SaleRecord to the store.

    Process:
    1. Check stock across all line items
    2. If the blocking policy is on and stock is short, fail without calling
       the store
    3. Update in place when the record already has a sale_id, otherwise create
    4. Return the persisted record, or the PersistenceError on failure

    Args:
        record: Validated sale record
        store: Persistence collaborator
        config: Billing configuration (defaults apply when omitted)

    Returns:
        SaleSubmissionResult with success status, persisted sale and warnings
    """
    config = config or BillingConfig()
    shortages = stock_shortages(record.line_items)

    for shortage in shortages:
        logger.warning(
            "Sale exceeds available stock",
            extra={
                "product_id": shortage.product_id,
                "requested": shortage.requested,
                "available": shortage.available,
                "blocking": config.block_on_insufficient_stock,
            },
        )

    if shortages and config.block_on_insufficient_stock:
        return SaleSubmissionResult.failed(shortages[0], shortages)

    try:
        if record.is_update:
            persisted = store.update_sale(record)
        else:
            persisted = store.create_sale(record)
    except PersistenceError as e:
        logger.warning(
            "Sale submission failed",
            extra={
                "sale_id": record.sale_id,
                "buyer_id": record.buyer_id,
                "operation": "update" if record.is_update else "create",
                "error": str(e),
            },
        )
        return SaleSubmissionResult.failed(e, shortages)

    logger.info(
        "Sale persisted",
        extra={
            "sale_id": persisted.sale_id,
            "invoice_number": persisted.invoice_number,
            "grand_total": str(persisted.grand_total),
            "status": persisted.status.value,
            "operation": "update" if record.is_update else "create",
        },
    )

    return SaleSubmissionResult(success=True, sale=persisted, error=None, warnings=shortages)


def process_sale(
    buyer_id: Optional[str],
    line_items: Optional[Iterable[LineItem]],
    sale_date: Optional[date],
    amount_paid: Any,
    store: SaleStore,
    existing_id: Optional[str] = None,
    *,
    invoice_number: Optional[str] = None,
    config: Optional[BillingConfig] = None,
) -> SaleSubmissionResult:
    """
    Build and submit a sale in one step.

    A ValidationError is returned before any network call is made.

    Example:
        result = process_sale("buyer-1", items, date.today(), Decimal("500"), store)
        if result.success:
            print(f"Invoice {result.sale.invoice_number}: due {result.sale.amount_due}")
        else:
            print(f"Sale failed: {result.error}")
    """
    config = config or BillingConfig()

    try:
        record = build_sale_record(
            buyer_id,
            line_items,
            sale_date,
            amount_paid,
            existing_id,
            invoice_number=invoice_number,
            currency=config.currency,
        )
    except ValidationError as e:
        return SaleSubmissionResult.failed(e)

    return submit_sale(record, store, config=config)


__all__ = [
    "SaleStore",
    "SaleSubmissionResult",
    "SubmissionError",
    "submit_sale",
    "process_sale",
]
