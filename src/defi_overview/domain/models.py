"""Overview payload schema and the derived summary types."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

from .protocols import Blockchain, DefiProtocol

ZERO = Decimal(0)


class BalanceType(str, Enum):
    ASSET = "Asset"
    LIABILITY = "Liability"


class _Payload(BaseModel):
    """Accepts both the backend's snake_case and camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Balance(_Payload):
    amount: Decimal
    usd_value: Decimal


class ProtocolInfo(_Payload):
    name: str
    icon: str | None = None


class BaseBalance(_Payload):
    token_address: str
    token_name: str
    token_symbol: str
    balance: Balance


class ProtocolBalanceEntry(_Payload):
    """One (address, protocol, asset) balance snapshot from the overview fetch."""

    protocol: ProtocolInfo
    base_balance: BaseBalance
    balance_type: BalanceType


AllDefiProtocols = dict[str, list[ProtocolBalanceEntry]]

_ALL_DEFI_PROTOCOLS = TypeAdapter(AllDefiProtocols)


def parse_all_defi_protocols(payload: Any) -> AllDefiProtocols:
    """Validate the raw overview payload.

    Raises:
        pydantic.ValidationError: If the payload does not match the schema
    """
    return _ALL_DEFI_PROTOCOLS.validate_python(payload)


@dataclass
class TokenInfo:
    token_name: str
    token_symbol: str


@dataclass
class AssetBalance:
    token_address: str
    token_name: str
    token_symbol: str
    amount: Decimal
    usd_value: Decimal

    @classmethod
    def from_base_balance(cls, base: BaseBalance) -> AssetBalance:
        return cls(
            token_address=base.token_address,
            token_name=base.token_name,
            token_symbol=base.token_symbol,
            amount=base.balance.amount,
            usd_value=base.balance.usd_value,
        )


@dataclass
class DefiProtocolSummary:
    """Per-protocol rollup shown in the overview."""

    protocol: ProtocolInfo
    token_info: TokenInfo | None = None
    assets: list[AssetBalance] = field(default_factory=list)
    deposits: bool = False
    liabilities: bool = False
    deposits_url: str | None = None
    liabilities_url: str | None = None
    total_collateral_usd: Decimal = ZERO
    total_debt_usd: Decimal = ZERO
    total_lending_deposit_usd: Decimal = ZERO
    balance_usd: Decimal | None = None

    @property
    def should_display(self) -> bool:
        return (
            self.total_lending_deposit_usd > ZERO
            or self.total_debt_usd > ZERO
            or (self.balance_usd is not None and self.balance_usd > ZERO)
            or self.total_collateral_usd > ZERO
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocol": self.protocol.model_dump(),
            "token_info": (
                None
                if self.token_info is None
                else {
                    "token_name": self.token_info.token_name,
                    "token_symbol": self.token_info.token_symbol,
                }
            ),
            "assets": [
                {
                    "token_address": asset.token_address,
                    "token_name": asset.token_name,
                    "token_symbol": asset.token_symbol,
                    "balance": {
                        "amount": str(asset.amount),
                        "usd_value": str(asset.usd_value),
                    },
                }
                for asset in self.assets
            ],
            "deposits": self.deposits,
            "liabilities": self.liabilities,
            "deposits_url": self.deposits_url,
            "liabilities_url": self.liabilities_url,
            "total_collateral_usd": str(self.total_collateral_usd),
            "total_debt_usd": str(self.total_debt_usd),
            "total_lending_deposit_usd": str(self.total_lending_deposit_usd),
            "balance_usd": None if self.balance_usd is None else str(self.balance_usd),
        }


@dataclass
class DefiAccount:
    address: str
    chain: Blockchain = Blockchain.ETH
    protocols: list[DefiProtocol] = field(default_factory=list)


@dataclass(frozen=True)
class LoanSummary:
    total_collateral_usd: Decimal = ZERO
    total_debt: Decimal = ZERO


ProtocolsSnapshot = Mapping[str, tuple[ProtocolBalanceEntry, ...]]


def freeze_protocols(protocols: Mapping[str, Any]) -> ProtocolsSnapshot:
    """Return a read-only snapshot of the raw overview state."""
    return MappingProxyType(
        {address: tuple(entries) for address, entries in protocols.items()}
    )
