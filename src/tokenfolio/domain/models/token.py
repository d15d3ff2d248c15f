"""Token holding model."""

import math
from dataclasses import dataclass, field
from typing import Any, Optional


def coerce_price(raw: Any) -> Optional[float]:
    """Return a usable positive USD price or None. Zero and null are never prices."""
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


@dataclass
class TokenMetadata:
    """Human-readable labels for a mint."""

    symbol: Optional[str] = None
    name: Optional[str] = None
    icon: Optional[str] = None

    def to_dict(self) -> dict:
        return {"symbol": self.symbol, "name": self.name, "icon": self.icon}

    @classmethod
    def from_dict(cls, data: dict) -> "TokenMetadata":
        return cls(
            symbol=data.get("symbol") or None,
            name=data.get("name") or None,
            icon=data.get("icon") or None,
        )


@dataclass
class Token:
    """
    One holding in a wallet.

    IMPORTANT: never assign price or value directly; use apply_price() and
    clear_price() so value always tracks the price it was computed from.
    """

    mint: str
    balance: int
    decimals: int
    ui_balance: float
    symbol: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = field(default=None)
    value: Optional[float] = field(default=None)
    icon: Optional[str] = None

    @classmethod
    def from_raw(cls, mint: str, balance: int, decimals: int, **labels) -> "Token":
        """Build a token from raw base units, deriving the UI balance."""
        return cls(
            mint=mint,
            balance=balance,
            decimals=decimals,
            ui_balance=balance / (10 ** decimals),
            **labels,
        )

    @property
    def is_nft(self) -> bool:
        """Zero-decimal holdings are treated as non-fungible."""
        return self.decimals == 0

    @property
    def label(self) -> str:
        """Symbol if known, otherwise the mint."""
        return self.symbol or self.mint

    def apply_price(self, price: float) -> None:
        """Attach a USD unit price and recompute value."""
        self.price = price
        self.value = self.ui_balance * price

    def clear_price(self) -> None:
        """Strip price and value (token is unpriced)."""
        self.price = None
        self.value = None

    def apply_metadata(self, metadata: TokenMetadata) -> None:
        """Fill labels the chain scan left unset."""
        self.symbol = self.symbol or metadata.symbol
        self.name = self.name or metadata.name
        self.icon = self.icon or metadata.icon
