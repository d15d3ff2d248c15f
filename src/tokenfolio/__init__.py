"""Wallet token valuation and liquidity-filtering pipeline."""

__version__ = "0.1.0"
