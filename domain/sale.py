"""
Domain: Sale records (bills / invoices) and the sale record builder.

Contract rules implemented here:
- A sale references a buyer id and holds at least one line item.
- grand_total and status are derived through the bill aggregator; they are
  computed once by the builder and are consistent with the line items.
- A record built with an existing id is an update of that sale: the id (and
  invoice number, when known) are preserved and no new invoice is requested.
- The persistence collaborator assigns sale_id, invoice_number and created_at
  on first creation; `persisted()` returns a new instance carrying them.

The builder is pure: identical inputs yield equal records.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from .bill import SaleStatus, aggregate, reconcile
from .errors import ValidationError
from .line_item import LineItem
from .money import to_decimal
from .time import as_sale_date, require_utc_timestamp

DEFAULT_CURRENCY = "INR"


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable sale record ready to be handed to the persistence collaborator.

    sale_id / invoice_number / created_at are None until the record has been
    persisted for the first time.
    """

    buyer_id: str
    line_items: Tuple[LineItem, ...]
    sale_date: date
    amount_paid: Decimal
    grand_total: Decimal
    status: SaleStatus
    currency: str = DEFAULT_CURRENCY
    sale_id: Optional[str] = None
    invoice_number: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

    @property
    def is_update(self) -> bool:
        return self.sale_id is not None

    @property
    def amount_due(self) -> Decimal:
        return reconcile(self.grand_total, self.amount_paid).amount_due

    def persisted(
        self,
        *,
        sale_id: str,
        invoice_number: Optional[str],
        created_at: Optional[datetime] = None,
    ) -> "SaleRecord":
        """Return a copy carrying the identity assigned by the server."""

        return replace(
            self,
            sale_id=sale_id,
            invoice_number=invoice_number if invoice_number is not None else self.invoice_number,
            created_at=created_at if created_at is not None else self.created_at,
        )


def _validate_line_items(line_items: Optional[Iterable[Any]], errors: Dict[str, str]) -> Tuple[LineItem, ...]:
    items: Sequence[Any] = tuple(line_items) if line_items is not None else ()
    if not items:
        errors["line_items"] = "At least one product is required"
        return ()

    for index, item in enumerate(items):
        if not isinstance(item, LineItem):
            errors[f"line_items[{index}]"] = "Select a product, quantity and price"
    return tuple(item for item in items if isinstance(item, LineItem))


def build_sale_record(
    buyer_id: Optional[str],
    line_items: Optional[Iterable[LineItem]],
    sale_date: Optional[date],
    amount_paid: Any,
    existing_id: Optional[str] = None,
    *,
    invoice_number: Optional[str] = None,
    currency: str = DEFAULT_CURRENCY,
) -> SaleRecord:
    """
    Validate inputs and assemble a SaleRecord.

    Every invalid field is reported at once through a single ValidationError
    whose `errors` map is keyed by field.

    Args:
        buyer_id: Buyer reference (non-empty)
        line_items: Resolved line items (at least one)
        sale_date: Calendar date of the sale; datetimes are reduced to a date
        amount_paid: Amount received so far (>= 0)
        existing_id: Id of the sale being edited; makes this record an update
        invoice_number: Invoice number already assigned to `existing_id`
        currency: ISO currency code

    Returns:
        SaleRecord with grand_total and status computed

    Raises:
        ValidationError: If any input is missing or malformed
    """
    errors: Dict[str, str] = {}

    if buyer_id is None or not str(buyer_id).strip():
        errors["buyer_id"] = "Buyer is required"

    items = _validate_line_items(line_items, errors)

    if sale_date is None:
        errors["sale_date"] = "Sale date is required"
    elif not isinstance(sale_date, date):
        errors["sale_date"] = "Sale date must be a date"

    paid: Optional[Decimal] = None
    if amount_paid is None:
        errors["amount_paid"] = "Amount paid is required"
    else:
        try:
            paid = to_decimal("amount_paid", amount_paid)
        except ValidationError as exc:
            errors.update(exc.errors)
        else:
            if paid < 0:
                errors["amount_paid"] = "Amount paid must be at least 0"

    if existing_id is not None and not str(existing_id).strip():
        errors["existing_id"] = "Sale id must not be blank"

    if errors:
        raise ValidationError(errors)

    totals = aggregate(items)
    reconciliation = reconcile(totals.grand_total, paid)

    return SaleRecord(
        buyer_id=str(buyer_id).strip(),
        line_items=items,
        sale_date=as_sale_date(sale_date),
        amount_paid=paid,
        grand_total=totals.grand_total,
        status=reconciliation.status,
        currency=currency,
        sale_id=existing_id,
        invoice_number=invoice_number if existing_id is not None else None,
    )


__all__ = ["DEFAULT_CURRENCY", "SaleRecord", "build_sale_record"]
