"""Domain layer: holdings, cache entries and valuation views."""
