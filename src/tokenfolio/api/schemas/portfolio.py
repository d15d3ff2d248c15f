"""Pydantic schemas for the portfolio valuation API.

Field names are camelCase on the wire (uiBalance, totalValue, ...).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tokenfolio.domain.models import PricingStatus, Token
from tokenfolio.domain.views import Portfolio


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TokenHolding(CamelModel):
    """One raw holding from the chain scan: balances populated, price unset."""

    mint: str = Field(min_length=1)
    balance: int = Field(ge=0)
    decimals: int = Field(ge=0)
    ui_balance: Optional[float] = Field(default=None, ge=0)
    symbol: Optional[str] = None
    name: Optional[str] = None
    icon: Optional[str] = None

    def to_domain(self) -> Token:
        """Convert to a domain Token, deriving uiBalance when it was not sent."""
        labels = {"symbol": self.symbol, "name": self.name, "icon": self.icon}
        if self.ui_balance is None:
            return Token.from_raw(self.mint, self.balance, self.decimals, **labels)
        return Token(
            mint=self.mint,
            balance=self.balance,
            decimals=self.decimals,
            ui_balance=self.ui_balance,
            **labels,
        )


class ValuationRequest(CamelModel):
    """Request body: the wallet's raw token list."""

    tokens: list[TokenHolding] = Field(default_factory=list)


class TokenResponse(CamelModel):
    """A valued token."""

    mint: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    decimals: int
    balance: int
    ui_balance: float
    price: Optional[float] = None
    value: Optional[float] = None
    icon: Optional[str] = None

    @classmethod
    def from_domain(cls, token: Token) -> "TokenResponse":
        return cls(
            mint=token.mint,
            symbol=token.symbol,
            name=token.name,
            decimals=token.decimals,
            balance=token.balance,
            ui_balance=token.ui_balance,
            price=token.price,
            value=token.value,
            icon=token.icon,
        )


class PortfolioResponse(CamelModel):
    """Portfolio snapshot for one wallet."""

    address: str
    tokens: list[TokenResponse]
    total_value: float
    token_count: int
    last_updated: Optional[datetime] = None
    pricing_status: PricingStatus = PricingStatus.OK
    pricing_error: Optional[str] = None

    @classmethod
    def from_domain(cls, portfolio: Portfolio) -> "PortfolioResponse":
        return cls(
            address=portfolio.address,
            tokens=[TokenResponse.from_domain(t) for t in portfolio.tokens],
            total_value=portfolio.total_value,
            token_count=portfolio.token_count,
            last_updated=portfolio.last_updated,
            pricing_status=portfolio.pricing_status,
            pricing_error=portfolio.pricing_error,
        )
