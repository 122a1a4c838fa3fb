"""
Domain: Buyers.

Buyers are referenced by id only inside sale computation; the remaining
attributes exist so pickers can render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BuyerType(str, Enum):
    SHOPKEEPER = "shopkeeper"
    TECHNICIAN = "technician"


@dataclass(frozen=True, slots=True)
class Buyer:
    buyer_id: str
    name: str
    buyer_type: Optional[BuyerType] = None
    town_id: Optional[str] = None
    town_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Label shown in the buyer dropdown, e.g. "Ravi Traders - NAGPUR"."""
        if self.town_name:
            return f"{self.name} - {self.town_name}"
        return self.name
