"""
Row and payload models for the Supabase tables.

Pydantic models for validating rows returned by PostgREST and serializing the
payloads sent to it. Catalog rows accept either snake_case columns or the
camelCase names used by the original REST API (regularPrice, _id, ...).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from domain.bill import SaleStatus
from domain.buyer import Buyer, BuyerType
from domain.line_item import LineItem
from domain.product import PriceTier, Product
from domain.sale import DEFAULT_CURRENCY, SaleRecord
from domain.time import parse_utc_datetime


def _float_to_decimal(value: Any) -> Any:
    # JSON numbers arrive as floats; go through str so 0.1 stays 0.1
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _int_id_to_str(value: Any) -> Any:
    # Tables keyed by serial columns return integer ids
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# ============================================================================
# Catalog Models
# ============================================================================

class ProductRow(BaseModel):
    """Single row of the products table."""
    id: Union[str, int] = Field(validation_alias=AliasChoices("id", "_id", "product_id"))
    name: str
    description: Optional[str] = None
    quantity: int = Field(ge=0)
    purchase_price: Decimal = Field(validation_alias=AliasChoices("purchase_price", "purchasePrice"))
    regular_price: Decimal = Field(validation_alias=AliasChoices("regular_price", "regularPrice"))
    bulk_price: Decimal = Field(validation_alias=AliasChoices("bulk_price", "bulkPrice"))

    @field_validator("purchase_price", "regular_price", "bulk_price", mode="before")
    @classmethod
    def floats_as_decimal(cls, value: Any) -> Any:
        return _float_to_decimal(value)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "65f1c0a2e4b0a1b2c3d4e5f6",
                "name": "Ceiling Fan 1200mm",
                "description": "White, 3 blades",
                "quantity": 50,
                "purchase_price": "70.00",
                "regular_price": "100.00",
                "bulk_price": "80.00"
            }
        }

    def to_domain(self) -> Product:
        return Product(
            product_id=str(self.id),
            name=self.name,
            description=self.description,
            quantity=self.quantity,
            purchase_price=self.purchase_price,
            regular_price=self.regular_price,
            bulk_price=self.bulk_price,
        )


class TownRef(BaseModel):
    """Embedded town (PostgREST `town:towns(name)` select)."""
    name: str


class BuyerRow(BaseModel):
    """Single row of the buyers table."""
    id: Union[str, int] = Field(validation_alias=AliasChoices("id", "_id", "buyer_id"))
    name: str
    type: Optional[BuyerType] = None
    town_id: Optional[Union[str, int]] = Field(default=None, validation_alias=AliasChoices("town_id", "townId"))
    town: Optional[TownRef] = None

    def to_domain(self) -> Buyer:
        return Buyer(
            buyer_id=str(self.id),
            name=self.name,
            buyer_type=self.type,
            town_id=str(self.town_id) if self.town_id is not None else None,
            town_name=self.town.name if self.town else None,
        )


# ============================================================================
# Sale Models
# ============================================================================

class SaleLineRow(BaseModel):
    """Single line item, stored inside the sale's line_items JSON column."""
    product_id: str
    product_name: Optional[str] = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = Field(ge=0)
    total_amount: Decimal
    tier: PriceTier = PriceTier.REGULAR
    price_overridden: bool = False

    @field_validator("unit_price", "total_amount", mode="before")
    @classmethod
    def floats_as_decimal(cls, value: Any) -> Any:
        return _float_to_decimal(value)

    @field_validator("product_id", mode="before")
    @classmethod
    def ids_as_str(cls, value: Any) -> Any:
        return _int_id_to_str(value)

    @classmethod
    def from_domain(cls, item: LineItem) -> "SaleLineRow":
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_amount=item.total,
            tier=item.tier,
            price_overridden=item.price_overridden,
        )

    def to_domain(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            product_name=self.product_name,
            tier=self.tier,
            price_overridden=self.price_overridden,
        )


class SalePayload(BaseModel):
    """
    Body sent on insert (POST) and update (PATCH).

    Identity columns (id, invoice_number, created_at) are never sent; the
    database assigns them on insert and they are immutable afterwards.
    """
    buyer_id: str
    sale_date: date
    amount_paid: Decimal
    grand_total: Decimal
    status: SaleStatus
    currency: str = DEFAULT_CURRENCY
    line_items: List[SaleLineRow] = Field(min_length=1)

    @field_validator("amount_paid", "grand_total", mode="before")
    @classmethod
    def floats_as_decimal(cls, value: Any) -> Any:
        return _float_to_decimal(value)

    @field_validator("buyer_id", mode="before")
    @classmethod
    def ids_as_str(cls, value: Any) -> Any:
        return _int_id_to_str(value)

    @classmethod
    def from_record(cls, record: SaleRecord) -> "SalePayload":
        return cls(
            buyer_id=record.buyer_id,
            sale_date=record.sale_date,
            amount_paid=record.amount_paid,
            grand_total=record.grand_total,
            status=record.status,
            currency=record.currency,
            line_items=[SaleLineRow.from_domain(item) for item in record.line_items],
        )


class SaleRow(SalePayload):
    """Single row of the sales table, as returned by PostgREST."""
    id: Union[str, int]
    invoice_number: Optional[Union[str, int]] = None
    created_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "7d1e2f1c-5c1a-4f57-9d0e-3f1f3c9b8a10",
                "invoice_number": "INV-000042",
                "buyer_id": "b-17",
                "sale_date": "2025-01-15",
                "amount_paid": "500.00",
                "grand_total": "1100.00",
                "status": "due",
                "currency": "INR",
                "line_items": [],
                "created_at": "2025-01-15T10:30:00Z"
            }
        }

    def to_domain(self) -> SaleRecord:
        return SaleRecord(
            buyer_id=self.buyer_id,
            line_items=tuple(line.to_domain() for line in self.line_items),
            sale_date=self.sale_date,
            amount_paid=self.amount_paid,
            grand_total=self.grand_total,
            status=self.status,
            currency=self.currency,
            sale_id=str(self.id),
            invoice_number=str(self.invoice_number) if self.invoice_number is not None else None,
            created_at=parse_utc_datetime(self.created_at) if self.created_at is not None else None,
        )
