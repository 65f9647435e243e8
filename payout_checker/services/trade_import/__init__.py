"""Broker trade import relay via TradesViz."""

from payout_checker.services.trade_import.client import TradeImportError, TradesVizClient
from payout_checker.services.trade_import.relay import (
    EXTRA_CELLS_KEY,
    ImportOutcome,
    ImportRelay,
    ImportState,
    parse_trades_csv,
)

__all__ = [
    "EXTRA_CELLS_KEY",
    "ImportOutcome",
    "ImportRelay",
    "ImportState",
    "TradeImportError",
    "TradesVizClient",
    "parse_trades_csv",
]
