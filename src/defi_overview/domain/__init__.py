"""Domain types for the DeFi overview."""

from __future__ import annotations

from .models import (
    AllDefiProtocols,
    AssetBalance,
    Balance,
    BalanceType,
    BaseBalance,
    DefiAccount,
    DefiProtocolSummary,
    LoanSummary,
    ProtocolBalanceEntry,
    ProtocolInfo,
    TokenInfo,
    parse_all_defi_protocols,
)
from .modules import ALL_DECENTRALIZED_EXCHANGES, ALL_MODULES, Module, ResetGroup
from .protocols import Blockchain, DefiProtocol, ProtocolVersion

__all__ = [
    "ALL_DECENTRALIZED_EXCHANGES",
    "ALL_MODULES",
    "AllDefiProtocols",
    "AssetBalance",
    "Balance",
    "BalanceType",
    "BaseBalance",
    "Blockchain",
    "DefiAccount",
    "DefiProtocol",
    "DefiProtocolSummary",
    "LoanSummary",
    "Module",
    "ProtocolBalanceEntry",
    "ProtocolInfo",
    "ProtocolVersion",
    "ResetGroup",
    "TokenInfo",
    "parse_all_defi_protocols",
]
