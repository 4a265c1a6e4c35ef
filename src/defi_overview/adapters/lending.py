"""Lending deposit, collateral and debt totals computed from adapter balances."""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping
from decimal import Decimal
from typing import Any

from ..domain.models import ZERO, LoanSummary
from ..domain.protocols import DefiProtocol
from .base import AddressSource, DefiAdapters


def _usd(balance: Any) -> Decimal:
    """USD value of a ``{"amount", "usd_value"}`` balance, zero when absent."""
    if not isinstance(balance, Mapping):
        return ZERO
    value = balance.get("usd_value", balance.get("usdValue"))
    return ZERO if value is None else Decimal(str(value))


def _selected(protocols: Collection[DefiProtocol], protocol: DefiProtocol) -> bool:
    return not protocols or protocol in protocols


class AdapterLendingTotals:
    """Reads the balances held by the adapters on every call.

    Expected balance shapes, all keyed by address:
        Aave, Compound: ``{"lending": {asset: {"balance": b}}, "borrowing": {...}}``
        Yearn vaults: ``{vault: {"underlying_value": b}}``
        MakerDAO DSR: ``b``
        MakerDAO vaults: ``[{"collateral": b, "debt": b}]``
        Liquity: ``{"trove": {"collateral": {"balance": b}, "debt": {"balance": b}}}``
    """

    def __init__(self, adapters: DefiAdapters):
        self.adapters = adapters

    def _balances(
        self,
        source: AddressSource | None,
        addresses: Collection[str] = (),
    ) -> Iterator[Any]:
        if source is None:
            return
        for address, balance in source.balances.items():
            if not addresses or address in addresses:
                yield balance

    def _lending_side(
        self,
        source: AddressSource | None,
        side: str,
        addresses: Collection[str] = (),
    ) -> Decimal:
        total = ZERO
        for balance in self._balances(source, addresses):
            for asset in (balance.get(side) or {}).values():
                total += _usd(asset.get("balance"))
        return total

    def total_lending_deposit(
        self,
        protocols: Collection[DefiProtocol],
        addresses: Collection[str],
    ) -> Decimal:
        total = ZERO
        a = self.adapters
        if _selected(protocols, DefiProtocol.AAVE):
            total += self._lending_side(a.aave, "lending", addresses)
        if _selected(protocols, DefiProtocol.COMPOUND):
            total += self._lending_side(a.compound, "lending", addresses)
        for protocol, source in (
            (DefiProtocol.YEARN_VAULTS, a.yearn_vaults),
            (DefiProtocol.YEARN_VAULTS_V2, a.yearn_vaults_v2),
        ):
            if not _selected(protocols, protocol):
                continue
            for vaults in self._balances(source, addresses):
                for vault in vaults.values():
                    total += _usd(vault.get("underlying_value"))
        if _selected(protocols, DefiProtocol.MAKERDAO_DSR):
            for balance in self._balances(a.makerdao_dsr, addresses):
                total += _usd(balance)
        return total

    def loan_summary(self, protocols: Collection[DefiProtocol]) -> LoanSummary:
        collateral = ZERO
        debt = ZERO
        a = self.adapters

        for protocol, source in (
            (DefiProtocol.AAVE, a.aave),
            (DefiProtocol.COMPOUND, a.compound),
        ):
            if _selected(protocols, protocol):
                collateral += self._lending_side(source, "lending")
                debt += self._lending_side(source, "borrowing")

        if _selected(protocols, DefiProtocol.MAKERDAO_VAULTS):
            for vaults in self._balances(a.makerdao_vaults):
                for vault in vaults:
                    collateral += _usd(vault.get("collateral"))
                    debt += _usd(vault.get("debt"))

        if _selected(protocols, DefiProtocol.LIQUITY):
            for balance in self._balances(a.liquity):
                nested = balance.get("balances") or {}
                trove = balance.get("trove") or nested.get("trove") or {}
                collateral += _usd((trove.get("collateral") or {}).get("balance"))
                debt += _usd((trove.get("debt") or {}).get("balance"))

        return LoanSummary(total_collateral_usd=collateral, total_debt=debt)
