"""
Domain: Bill aggregation and payment reconciliation (pure arithmetic).

- grand_total is the sum of line totals; an empty bill totals 0.00.
- status is COMPLETED iff amount_paid >= grand_total, otherwise DUE.
- amount_due = grand_total - amount_paid, signed. A negative amount due is a
  credit (overpayment) and is reported as such, never clamped to zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

from .line_item import LineItem
from .money import ZERO


class SaleStatus(str, Enum):
    COMPLETED = "completed"
    DUE = "due"


@dataclass(frozen=True, slots=True)
class BillTotals:
    grand_total: Decimal
    item_count: int
    total_quantity: int


@dataclass(frozen=True, slots=True)
class Reconciliation:
    amount_due: Decimal
    status: SaleStatus

    @property
    def credit(self) -> Decimal:
        """Overpayment as a positive amount, 0 when nothing was overpaid."""
        return -self.amount_due if self.amount_due < 0 else ZERO


def aggregate(line_items: Iterable[LineItem]) -> BillTotals:
    grand_total = ZERO
    item_count = 0
    total_quantity = 0

    for item in line_items:
        grand_total += item.total
        item_count += 1
        total_quantity += item.quantity

    return BillTotals(grand_total=grand_total, item_count=item_count, total_quantity=total_quantity)


def reconcile(grand_total: Decimal, amount_paid: Decimal) -> Reconciliation:
    status = SaleStatus.COMPLETED if amount_paid >= grand_total else SaleStatus.DUE
    return Reconciliation(amount_due=grand_total - amount_paid, status=status)


__all__ = ["SaleStatus", "BillTotals", "Reconciliation", "aggregate", "reconcile"]
