"""
Pricing service for role-gated price tiers.

Regular prices are visible to every role. Bulk prices are reserved for admin
and staff; technicians only ever see and sell at the regular price.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List

from domain.product import PriceTier, Product


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    TECHNICIAN = "technician"


_TIER_ROLES: Dict[PriceTier, FrozenSet[UserRole]] = {
    PriceTier.REGULAR: frozenset({UserRole.ADMIN, UserRole.STAFF, UserRole.TECHNICIAN}),
    PriceTier.BULK: frozenset({UserRole.ADMIN, UserRole.STAFF}),
}

_TIER_LABELS: Dict[PriceTier, str] = {
    PriceTier.REGULAR: "Regular Price",
    PriceTier.BULK: "Bulk Price",
}


@dataclass(frozen=True, slots=True)
class TierPrice:
    """Single row of a product's pricing table."""
    tier: PriceTier
    label: str
    unit_price: Decimal


def can_use_tier(role: UserRole, tier: PriceTier) -> bool:
    return role in _TIER_ROLES[tier]


def visible_price_tiers(product: Product, role: UserRole) -> List[TierPrice]:
    """
    Pricing rows the given role may see for a product.

    Args:
        product: Catalog product
        role: Role of the signed-in user

    Returns:
        TierPrice rows in display order (regular first); never empty, since
        every role can see the regular price

    Example:
        rows = visible_price_tiers(product, UserRole.TECHNICIAN)
        # [TierPrice(tier=PriceTier.REGULAR, label="Regular Price", unit_price=Decimal("100.00"))]
    """
    return [
        TierPrice(tier=tier, label=_TIER_LABELS[tier], unit_price=product.price_for(tier))
        for tier in (PriceTier.REGULAR, PriceTier.BULK)
        if can_use_tier(role, tier)
    ]


__all__ = [
    "UserRole",
    "TierPrice",
    "can_use_tier",
    "visible_price_tiers",
]
