"""
Core business logic services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockledger.core.services.stock_ledger import StockLedger
from stockledger.core.services.stock_policy import StockPolicy, StockWarning
from stockledger.core.services.stock_status import (
    StockStatusService,
    classify,
    classify_snapshot,
)

__all__ = [
    # Ledger Core
    "StockLedger",
    # Negative-stock policy
    "StockPolicy",
    "StockWarning",
    # Stock Status Classifier
    "StockStatusService",
    "classify",
    "classify_snapshot",
]
