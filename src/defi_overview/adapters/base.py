"""Narrow contracts the engine consumes from protocol adapters."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from ..domain.models import LoanSummary
from ..domain.modules import Module
from ..domain.protocols import DefiProtocol

HistoryState = Mapping[str, Any] | Sequence[Any]


@runtime_checkable
class Resettable(Protocol):
    def reset(self) -> None: ...


@runtime_checkable
class BalanceFetcher(Protocol):
    name: str

    async def fetch_balances(self, refresh: bool = False) -> None: ...


@runtime_checkable
class HistoryFetcher(Protocol):
    name: str

    async def fetch_history(self, refresh: bool = False, reset: bool = False) -> None: ...


@runtime_checkable
class AddressSource(Protocol):
    """Reactive balance and history state, read directly."""

    @property
    def balances(self) -> Mapping[str, Any]: ...

    @property
    def history(self) -> HistoryState: ...


class ProtocolAdapter(BalanceFetcher, HistoryFetcher, AddressSource, Resettable, Protocol):
    """Everything a full per-protocol adapter offers."""


@dataclass
class DefiAdapters:
    """Adapter handles injected into the engine, one per protocol version.

    A handle left as ``None`` means the module is not available.
    """

    aave: ProtocolAdapter | None = None
    compound: ProtocolAdapter | None = None
    yearn_vaults: ProtocolAdapter | None = None
    yearn_vaults_v2: ProtocolAdapter | None = None
    makerdao_dsr: ProtocolAdapter | None = None
    makerdao_vaults: ProtocolAdapter | None = None
    liquity: ProtocolAdapter | None = None
    uniswap: Resettable | None = None
    sushiswap: Resettable | None = None
    balancer: Resettable | None = None

    def reset_handlers(self) -> dict[Module, Resettable | None]:
        """Static module -> reset capability table, in module order."""
        handles: dict[Module, Resettable | None] = {
            Module.MAKERDAO_DSR: self.makerdao_dsr,
            Module.MAKERDAO_VAULTS: self.makerdao_vaults,
            Module.AAVE: self.aave,
            Module.COMPOUND: self.compound,
            Module.YEARN: self.yearn_vaults,
            Module.YEARN_V2: self.yearn_vaults_v2,
            Module.UNISWAP: self.uniswap,
            Module.SUSHISWAP: self.sushiswap,
            Module.BALANCER: self.balancer,
            Module.LIQUITY: self.liquity,
        }
        assert handles.keys() == set(Module), "every module needs a table entry"
        return handles

    def balance_fetchers(self) -> list[BalanceFetcher]:
        """Adapters refreshed after the overview fetch, in launch order."""
        candidates = (
            self.aave,
            self.makerdao_dsr,
            self.makerdao_vaults,
            self.compound,
            self.yearn_vaults,
            self.yearn_vaults_v2,
            self.liquity,
        )
        return [adapter for adapter in candidates if adapter is not None]

    def history_fetchers(self) -> dict[DefiProtocol, HistoryFetcher | None]:
        """Adapters whose history can be recomputed from scratch."""
        return {
            DefiProtocol.YEARN_VAULTS: self.yearn_vaults,
            DefiProtocol.YEARN_VAULTS_V2: self.yearn_vaults_v2,
            DefiProtocol.AAVE: self.aave,
        }

    def address_sources(self) -> dict[DefiProtocol, AddressSource | None]:
        """Protocols contributing accounts, in account-protocol order."""
        return {
            DefiProtocol.AAVE: self.aave,
            DefiProtocol.COMPOUND: self.compound,
            DefiProtocol.YEARN_VAULTS: self.yearn_vaults,
            DefiProtocol.YEARN_VAULTS_V2: self.yearn_vaults_v2,
            DefiProtocol.MAKERDAO_DSR: self.makerdao_dsr,
        }


class LendingTotals(Protocol):
    """Lending aggregates over the adapters' balances."""

    def loan_summary(self, protocols: Collection[DefiProtocol]) -> LoanSummary: ...

    def total_lending_deposit(
        self,
        protocols: Collection[DefiProtocol],
        addresses: Collection[str],
    ) -> Decimal: ...
