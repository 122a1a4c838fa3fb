"""
Billing configuration.

Settings are read from the environment (optionally from a `.env` file at the
project root) once, into an immutable BillingConfig that callers pass
explicitly to the services that need it.

Environment variables (all optional):
- BILLING_CURRENCY: ISO currency code for new sales (default: INR)
- BILLING_LOW_STOCK_THRESHOLD: stock below this counts as low (default: 10)
- BILLING_BLOCK_ON_INSUFFICIENT_STOCK: "true" to reject sales that exceed
  stock instead of warning (default: false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_DEFAULT_ENV_PATH = Path(__file__).parent.parent / ".env"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True, slots=True)
class BillingConfig:
    currency: str = "INR"
    low_stock_threshold: int = 10
    block_on_insufficient_stock: bool = False

    def __post_init__(self) -> None:
        if not self.currency:
            raise ValueError("currency must not be empty")
        if self.low_stock_threshold < 0:
            raise ValueError("low_stock_threshold must not be negative")


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise RuntimeError(f"Invalid boolean for {name}: {raw!r}. Use true or false.")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise RuntimeError(f"Invalid integer for {name}: {raw!r}") from None


def load_billing_config(env_path: Optional[Path] = None) -> BillingConfig:
    """
    Build a BillingConfig from environment variables.

    Variables already present in the environment win over the `.env` file.

    Raises:
        RuntimeError: If a variable is set but cannot be parsed
    """
    load_dotenv(dotenv_path=env_path or _DEFAULT_ENV_PATH)

    defaults = BillingConfig()
    currency = os.getenv("BILLING_CURRENCY") or defaults.currency

    raw_threshold = os.getenv("BILLING_LOW_STOCK_THRESHOLD")
    threshold = (
        _parse_int("BILLING_LOW_STOCK_THRESHOLD", raw_threshold)
        if raw_threshold is not None
        else defaults.low_stock_threshold
    )

    raw_block = os.getenv("BILLING_BLOCK_ON_INSUFFICIENT_STOCK")
    block = (
        _parse_bool("BILLING_BLOCK_ON_INSUFFICIENT_STOCK", raw_block)
        if raw_block is not None
        else defaults.block_on_insufficient_stock
    )

    return BillingConfig(
        currency=currency.strip().upper(),
        low_stock_threshold=threshold,
        block_on_insufficient_stock=block,
    )


__all__ = ["BillingConfig", "load_billing_config"]
