from __future__ import annotations

from .accounts import ACCOUNT_PROTOCOLS, derive_defi_accounts, protocol_addresses
from .summary import (
    LENDING_PROTOCOLS,
    LendingProtocol,
    accumulate_entries,
    add_entry,
    build_overview,
    lending_summary,
)

__all__ = [
    "ACCOUNT_PROTOCOLS",
    "LENDING_PROTOCOLS",
    "LendingProtocol",
    "accumulate_entries",
    "add_entry",
    "build_overview",
    "derive_defi_accounts",
    "lending_summary",
    "protocol_addresses",
]
