"""HTTP boundary for the valuation pipeline."""
