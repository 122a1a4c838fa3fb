"""
Domain: Error taxonomy for billing.

- ValidationError: malformed or missing input, caught before any network call.
- StockError: requested quantity exceeds available stock. Raised only when the
  blocking stock policy is enabled; otherwise carried as a warning value.
- PersistenceError: the persistence collaborator failed or answered with
  something unusable after a well-formed record was submitted.
"""

from __future__ import annotations

from typing import Mapping, Optional


class ValidationError(ValueError):
    """
    Local, recoverable input error.

    `errors` maps a field name (e.g. "buyer_id", "line_items[0].quantity") to
    a user-facing message so callers can render messages inline per field.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: message})


class StockError(Exception):
    """Requested quantity for a product exceeds what is in stock."""

    def __init__(self, product_id: str, requested: int, available: int, product_name: Optional[str] = None) -> None:
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.product_name = product_name
        label = product_name or product_id
        super().__init__(f"Insufficient stock for {label}: requested {requested}, available {available}")

    @property
    def shortage(self) -> int:
        return self.requested - self.available


class PersistenceError(RuntimeError):
    """Raised when storing or fetching a sale through the REST collaborator fails."""


__all__ = ["ValidationError", "StockError", "PersistenceError"]
