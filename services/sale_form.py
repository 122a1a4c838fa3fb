"""
Sale form session: the in-progress bill a user is editing.

States:
    editing -> submitting -> persisted
                          -> editing (submission failed, error kept in last_error)

Rules:
- Line items are re-resolved from the raw inputs on every read, so totals
  always reflect the latest quantity and price edits.
- Only one submission may be in flight; submit() refuses re-entry.
- A failed submission never discards inputs, so the user can retry.
- Once persisted, the form remembers the sale id and invoice number; further
  edits return it to editing and the next submit updates the same sale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from domain.bill import SaleStatus, aggregate, reconcile
from domain.errors import StockError, ValidationError
from domain.line_item import LineItem, resolve_line_item, stock_shortages
from domain.money import to_decimal
from domain.product import PriceTier, Product
from domain.sale import SaleRecord
from services.billing_config import BillingConfig
from services.pricing_service import UserRole, can_use_tier
from services.sale_service import SaleStore, SaleSubmissionResult, SubmissionError, process_sale

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    PERSISTED = "persisted"


@dataclass
class DraftLine:
    """Raw, possibly invalid, inputs of one table row."""
    product_id: Optional[str] = None
    quantity: Any = 1
    unit_price: Any = None  # None -> price of `tier`
    tier: PriceTier = PriceTier.REGULAR
    manual: bool = False


@dataclass(frozen=True, slots=True)
class BillPreview:
    """
    Live view of the bill for the current inputs.

    amount_due and status are None while amount_paid is not a valid amount.
    line_errors maps "line_items[i].<field>" to a message for rows that could
    not be resolved; those rows are left out of grand_total.
    """
    line_items: Tuple[LineItem, ...]
    grand_total: Decimal
    amount_due: Optional[Decimal]
    status: Optional[SaleStatus]
    stock_warnings: List[StockError] = field(default_factory=list)
    line_errors: Dict[str, str] = field(default_factory=dict)


class SaleForm:
    """
    One editing session for a sale.

    Products are passed in explicitly; the form never fetches anything.
    """

    def __init__(
        self,
        products: Iterable[Product],
        *,
        config: Optional[BillingConfig] = None,
        role: Optional[UserRole] = None,
        sale_date: Optional[date] = None,
    ) -> None:
        self._products: Dict[str, Product] = {product.product_id: product for product in products}
        self._config = config or BillingConfig()
        self._role = role
        self._state = FormState.EDITING

        self.buyer_id: Optional[str] = None
        self.sale_date: Optional[date] = sale_date or date.today()
        self.amount_paid: Any = Decimal("0")
        self.lines: List[DraftLine] = [DraftLine()]

        self.sale_id: Optional[str] = None
        self.invoice_number: Optional[str] = None
        self.last_error: Optional[SubmissionError] = None
        self.last_result: Optional[SaleSubmissionResult] = None

    @classmethod
    def from_record(
        cls,
        record: SaleRecord,
        products: Iterable[Product],
        *,
        config: Optional[BillingConfig] = None,
        role: Optional[UserRole] = None,
    ) -> "SaleForm":
        """Re-open a persisted sale for editing, keeping its id and prices."""

        form = cls(products, config=config, role=role, sale_date=record.sale_date)
        form.buyer_id = record.buyer_id
        form.amount_paid = record.amount_paid
        form.lines = [
            DraftLine(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tier=item.tier,
                manual=item.price_overridden,
            )
            for item in record.line_items
        ]
        form.sale_id = record.sale_id
        form.invoice_number = record.invoice_number
        if record.sale_id is not None:
            form._state = FormState.PERSISTED
        return form

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def is_submitting(self) -> bool:
        return self._state is FormState.SUBMITTING

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _begin_edit(self) -> None:
        if self._state is FormState.SUBMITTING:
            raise RuntimeError("Cannot edit a sale while it is being submitted")
        self._state = FormState.EDITING

    def set_buyer(self, buyer_id: Optional[str]) -> None:
        self._begin_edit()
        self.buyer_id = buyer_id

    def set_sale_date(self, sale_date: Optional[date]) -> None:
        self._begin_edit()
        self.sale_date = sale_date

    def set_amount_paid(self, amount_paid: Any) -> None:
        self._begin_edit()
        self.amount_paid = amount_paid

    def add_line(self) -> int:
        """Append an empty row and return its index."""
        self._begin_edit()
        self.lines.append(DraftLine())
        return len(self.lines) - 1

    def remove_line(self, index: int) -> None:
        self._begin_edit()
        del self.lines[index]

    def select_product(self, index: int, product_id: str) -> None:
        """Pick a product for a row; quantity resets to 1 at the regular price."""
        self._begin_edit()
        self.lines[index] = DraftLine(product_id=product_id)

    def set_quantity(self, index: int, quantity: Any) -> None:
        self._begin_edit()
        self.lines[index].quantity = quantity

    def set_unit_price(self, index: int, unit_price: Any) -> None:
        self._begin_edit()
        line = self.lines[index]
        line.unit_price = unit_price
        line.manual = True

    def select_tier(self, index: int, tier: PriceTier) -> None:
        """Switch a row to a price tier, dropping any manual price."""
        if self._role is not None and not can_use_tier(self._role, tier):
            raise ValidationError.single(
                f"line_items[{index}].tier",
                f"{tier.value} price is not available to {self._role.value}",
            )
        self._begin_edit()
        line = self.lines[index]
        line.tier = tier
        line.unit_price = None
        line.manual = False

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def _resolve_lines(self) -> Tuple[List[LineItem], Dict[str, str]]:
        items: List[LineItem] = []
        errors: Dict[str, str] = {}

        for index, line in enumerate(self.lines):
            prefix = f"line_items[{index}]"
            if not line.product_id:
                errors[f"{prefix}.product_id"] = "Product is required"
                continue
            product = self._products.get(line.product_id)
            if product is None:
                errors[f"{prefix}.product_id"] = "Product is no longer in the catalog"
                continue
            try:
                item = resolve_line_item(product, line.quantity, line.unit_price, tier=line.tier)
            except ValidationError as e:
                for name, message in e.errors.items():
                    errors[f"{prefix}.{name}"] = message
                continue
            items.append(replace(item, price_overridden=line.manual))

        return items, errors

    def line_items(self) -> Tuple[LineItem, ...]:
        items, _ = self._resolve_lines()
        return tuple(items)

    def preview(self) -> BillPreview:
        items, errors = self._resolve_lines()
        totals = aggregate(items)

        try:
            paid: Optional[Decimal] = to_decimal("amount_paid", self.amount_paid)
        except ValidationError:
            paid = None

        reconciliation = reconcile(totals.grand_total, paid) if paid is not None else None

        return BillPreview(
            line_items=tuple(items),
            grand_total=totals.grand_total,
            amount_due=reconciliation.amount_due if reconciliation else None,
            status=reconciliation.status if reconciliation else None,
            stock_warnings=stock_shortages(items),
            line_errors=errors,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, store: SaleStore) -> SaleSubmissionResult:
        """
        Submit the current inputs as a create (new sale) or update (re-opened
        or already persisted sale).

        Raises:
            RuntimeError: If a submission from this form is already in flight
        """
        if self._state is FormState.SUBMITTING:
            raise RuntimeError("A submission is already in flight for this form")

        items, line_errors = self._resolve_lines()
        if line_errors:
            result = SaleSubmissionResult.failed(ValidationError(line_errors))
            return self._finish(result)

        self._state = FormState.SUBMITTING
        try:
            result = process_sale(
                self.buyer_id,
                items,
                self.sale_date,
                self.amount_paid,
                store,
                self.sale_id,
                invoice_number=self.invoice_number,
                config=self._config,
            )
        finally:
            if self._state is FormState.SUBMITTING:
                self._state = FormState.EDITING

        return self._finish(result)

    def _finish(self, result: SaleSubmissionResult) -> SaleSubmissionResult:
        self.last_result = result
        if result.success and result.sale is not None:
            self.sale_id = result.sale.sale_id
            self.invoice_number = result.sale.invoice_number
            self.last_error = None
            self._state = FormState.PERSISTED
        else:
            self.last_error = result.error
            self._state = FormState.EDITING
            logger.debug("Sale form returned to editing", extra={"error": str(result.error)})
        return result


__all__ = ["FormState", "DraftLine", "BillPreview", "SaleForm"]
