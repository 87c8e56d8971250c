"""Inventory ledger and stock-movement engine for a grocery point of sale."""

__version__ = "1.0.0"
