from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

from ..adapters.base import AddressSource, HistoryState
from ..domain.models import DefiAccount
from ..domain.protocols import Blockchain, DefiProtocol

# Account-contributing protocols in the order they appear in each account
ACCOUNT_PROTOCOLS: tuple[DefiProtocol, ...] = (
    DefiProtocol.AAVE,
    DefiProtocol.COMPOUND,
    DefiProtocol.YEARN_VAULTS,
    DefiProtocol.YEARN_VAULTS_V2,
    DefiProtocol.MAKERDAO_DSR,
)


def _history_addresses(history: HistoryState) -> list[str]:
    if isinstance(history, Mapping):
        return list(history.keys())

    addresses = []
    for record in history:
        if isinstance(record, str):
            addresses.append(record)
        elif isinstance(record, Mapping):
            addresses.append(record["address"])
        else:
            addresses.append(record.address)
    return addresses


def protocol_addresses(
    balances: Mapping[str, Any],
    history: HistoryState,
) -> list[str]:
    """Unique addresses holding a balance or appearing in the history."""
    return list(dict.fromkeys([*balances.keys(), *_history_addresses(history)]))


def derive_defi_accounts(
    sources: Mapping[DefiProtocol, AddressSource | None],
    protocols: Collection[DefiProtocol] = (),
) -> list[DefiAccount]:
    """Build one account per address touching any of ``protocols``.

    Args:
        sources: Balance/history state per protocol; missing adapters are skipped
        protocols: Protocol filter, empty means all

    Returns:
        Accounts in first-seen address order. Each account lists its protocols
        in ``ACCOUNT_PROTOCOLS`` order.
    """
    accounts: dict[str, DefiAccount] = {}

    for protocol in ACCOUNT_PROTOCOLS:
        if protocols and protocol not in protocols:
            continue
        source = sources.get(protocol)
        if source is None:
            continue

        for address in protocol_addresses(source.balances, source.history):
            account = accounts.get(address)
            if account is None:
                accounts[address] = DefiAccount(
                    address=address,
                    chain=Blockchain.ETH,
                    protocols=[protocol],
                )
            else:
                account.protocols.append(protocol)

    return list(accounts.values())
