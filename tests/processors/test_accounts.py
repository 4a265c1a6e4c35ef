"""Tests for DeFi account derivation."""

from __future__ import annotations

from types import SimpleNamespace

from conftest import make_adapter

from defi_overview.domain.protocols import Blockchain, DefiProtocol
from defi_overview.processors.accounts import derive_defi_accounts, protocol_addresses


def test_protocol_addresses_unions_balances_and_history():
    addresses = protocol_addresses(
        {"0xA": {}, "0xB": {}},
        {"0xB": [], "0xC": []},
    )

    assert addresses == ["0xA", "0xB", "0xC"]


def test_protocol_addresses_accepts_history_lists():
    history = ["0xA", {"address": "0xB"}, SimpleNamespace(address="0xC")]

    assert protocol_addresses({}, history) == ["0xA", "0xB", "0xC"]


def test_accounts_merge_protocols_per_address():
    sources = {
        DefiProtocol.AAVE: make_adapter(balances={"0xA": {}}),
        DefiProtocol.COMPOUND: make_adapter(history={"0xA": [], "0xB": []}),
        DefiProtocol.MAKERDAO_DSR: make_adapter(balances={"0xB": "1"}),
    }

    accounts = derive_defi_accounts(sources)

    assert [account.address for account in accounts] == ["0xA", "0xB"]
    assert accounts[0].chain is Blockchain.ETH
    assert accounts[0].protocols == [DefiProtocol.AAVE, DefiProtocol.COMPOUND]
    assert accounts[1].protocols == [DefiProtocol.COMPOUND, DefiProtocol.MAKERDAO_DSR]


def test_each_protocol_listed_once_per_account():
    sources = {
        DefiProtocol.YEARN_VAULTS: make_adapter(
            balances={"0xA": {}}, history={"0xA": []}
        ),
    }

    accounts = derive_defi_accounts(sources)

    assert len(accounts) == 1
    assert accounts[0].protocols == [DefiProtocol.YEARN_VAULTS]


def test_protocol_filter_limits_accounts():
    sources = {
        DefiProtocol.AAVE: make_adapter(balances={"0xA": {}}),
        DefiProtocol.YEARN_VAULTS_V2: make_adapter(balances={"0xB": {}}),
    }

    accounts = derive_defi_accounts(sources, [DefiProtocol.YEARN_VAULTS_V2])

    assert [account.address for account in accounts] == ["0xB"]
    assert accounts[0].protocols == [DefiProtocol.YEARN_VAULTS_V2]


def test_missing_adapters_are_skipped():
    sources = {DefiProtocol.AAVE: None, DefiProtocol.COMPOUND: make_adapter()}

    assert derive_defi_accounts(sources) == []
