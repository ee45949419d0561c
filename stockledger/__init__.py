"""Stock ledger and valuation engine for multi-shop point of sale."""

__version__ = "1.0.0"
