from __future__ import annotations

from .base import (
    AddressSource,
    BalanceFetcher,
    DefiAdapters,
    HistoryFetcher,
    LendingTotals,
    ProtocolAdapter,
    Resettable,
)
from .lending import AdapterLendingTotals
from .module import MODULE_ENDPOINTS, ModuleAdapter, ModuleEndpoints, build_adapters

__all__ = [
    "AdapterLendingTotals",
    "AddressSource",
    "BalanceFetcher",
    "DefiAdapters",
    "HistoryFetcher",
    "LendingTotals",
    "MODULE_ENDPOINTS",
    "ModuleAdapter",
    "ModuleEndpoints",
    "ProtocolAdapter",
    "Resettable",
    "build_adapters",
]
