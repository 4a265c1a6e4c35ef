"""Tests for history resets and state resets."""

from __future__ import annotations

import asyncio
import logging

import pytest
from conftest import make_entry

from defi_overview.adapters.base import DefiAdapters
from defi_overview.domain.modules import (
    ALL_DECENTRALIZED_EXCHANGES,
    ALL_MODULES,
    Module,
)
from defi_overview.domain.protocols import DefiProtocol
from defi_overview.pipeline.context import DefiState
from defi_overview.pipeline.reset import ResetCoordinator
from defi_overview.premium import AirdropTracker, PremiumEntitlement
from defi_overview.status import Section, Status, StatusTracker


def _coordinator(adapters, premium=True, status=None):
    state = DefiState()
    airdrops = AirdropTracker()
    coordinator = ResetCoordinator(
        state,
        adapters,
        status or StatusTracker(),
        PremiumEntitlement(premium),
        airdrops,
    )
    return coordinator, state, airdrops


def _reset_calls(adapters: DefiAdapters) -> dict[str, int]:
    return {
        module.value: handler.reset.call_count
        for module, handler in adapters.reset_handlers().items()
    }


@pytest.mark.asyncio
async def test_reset_db_requires_premium(adapters):
    coordinator, _, _ = _coordinator(adapters, premium=False)

    await coordinator.reset_db([DefiProtocol.AAVE])

    adapters.aave.fetch_history.assert_not_called()
    assert coordinator.status.is_first_load(Section.DEFI_LENDING_HISTORY)


@pytest.mark.asyncio
async def test_reset_db_refetches_selected_history(adapters):
    coordinator, _, _ = _coordinator(adapters)

    await coordinator.reset_db([DefiProtocol.YEARN_VAULTS, DefiProtocol.AAVE])

    adapters.yearn_vaults.fetch_history.assert_awaited_once_with(refresh=True, reset=True)
    adapters.aave.fetch_history.assert_awaited_once_with(refresh=True, reset=True)
    adapters.yearn_vaults_v2.fetch_history.assert_not_called()
    adapters.compound.fetch_history.assert_not_called()
    assert coordinator.status.get_status(Section.DEFI_LENDING_HISTORY) is Status.LOADED


@pytest.mark.asyncio
async def test_reset_db_ignores_protocols_without_history_reset(adapters):
    coordinator, _, _ = _coordinator(adapters)

    await coordinator.reset_db([DefiProtocol.COMPOUND, DefiProtocol.MAKERDAO_DSR])

    adapters.compound.fetch_history.assert_not_called()
    adapters.makerdao_dsr.fetch_history.assert_not_called()


@pytest.mark.asyncio
async def test_reset_db_skipped_while_running(adapters):
    status = StatusTracker()
    status.set_status(Status.REFRESHING, Section.DEFI_LENDING_HISTORY)
    coordinator, _, _ = _coordinator(adapters, status=status)

    await coordinator.reset_db([DefiProtocol.AAVE])

    adapters.aave.fetch_history.assert_not_called()
    assert status.get_status(Section.DEFI_LENDING_HISTORY) is Status.REFRESHING


@pytest.mark.asyncio
async def test_reset_db_failure_propagates_and_section_settles(adapters):
    coordinator, _, _ = _coordinator(adapters)
    adapters.aave.fetch_history.side_effect = RuntimeError("history rebuild failed")

    with pytest.raises(RuntimeError, match="history rebuild failed"):
        await coordinator.reset_db([DefiProtocol.AAVE, DefiProtocol.YEARN_VAULTS_V2])

    adapters.yearn_vaults_v2.fetch_history.assert_awaited_once()
    assert coordinator.status.get_status(Section.DEFI_LENDING_HISTORY) is Status.LOADED


def _record_reset_order(adapters: DefiAdapters) -> list[Module]:
    order: list[Module] = []
    for module, handler in adapters.reset_handlers().items():
        handler.reset.side_effect = lambda module=module: order.append(module)
    return order


def test_reset_decentralized_exchanges(adapters):
    coordinator, _, _ = _coordinator(adapters)
    order = _record_reset_order(adapters)

    coordinator.reset_state(ALL_DECENTRALIZED_EXCHANGES)

    assert order == [Module.UNISWAP, Module.SUSHISWAP, Module.BALANCER]


def test_reset_all_modules_in_module_order(adapters):
    coordinator, _, _ = _coordinator(adapters)
    order = _record_reset_order(adapters)

    coordinator.reset_state(ALL_MODULES)

    assert order == list(Module)


def test_reset_single_module(adapters):
    coordinator, _, _ = _coordinator(adapters)

    coordinator.reset_state(Module.LIQUITY)
    coordinator.reset_state("yearn_vaults_v2")

    calls = _reset_calls(adapters)
    assert calls.pop("liquity") == 1
    assert calls.pop("yearn_vaults_v2") == 1
    assert set(calls.values()) == {0}


def test_reset_all_skips_missing_adapters():
    adapters = DefiAdapters()
    coordinator, _, _ = _coordinator(adapters)

    coordinator.reset_state(ALL_MODULES)


def test_reset_missing_module_logs_warning(caplog):
    coordinator, _, _ = _coordinator(DefiAdapters())

    with caplog.at_level(logging.WARNING, logger="defi_overview.pipeline.reset"):
        coordinator.reset_state(Module.AAVE)
        coordinator.reset_state("not_a_module")

    messages = [record.getMessage() for record in caplog.records]
    assert "Missing reset function for aave" in messages
    assert "Missing reset function for not_a_module" in messages


def test_reset_clears_everything(adapters):
    coordinator, state, airdrops = _coordinator(adapters)
    state.replace({"0xA": [make_entry("Aave", usd_value=1)]})
    airdrops.airdrops = {"0xA": {"uniswap": 400}}
    coordinator.status.set_status(Status.LOADED, Section.DEFI_OVERVIEW)
    coordinator.status.set_status(Status.LOADED, Section.DEFI_BALANCES)

    coordinator.reset()

    assert dict(state.all_protocols) == {}
    assert airdrops.airdrops == {}
    assert coordinator.status.is_first_load(Section.DEFI_OVERVIEW)
    assert coordinator.status.is_first_load(Section.DEFI_BALANCES)
    assert set(_reset_calls(adapters).values()) == {1}


@pytest.mark.asyncio
async def test_reset_during_reset_db_keeps_single_run(adapters):
    release = asyncio.Event()

    async def slow_history(refresh, reset):
        await release.wait()

    adapters.aave.fetch_history.side_effect = slow_history
    coordinator, _, _ = _coordinator(adapters)

    first = asyncio.create_task(coordinator.reset_db([DefiProtocol.AAVE]))
    await asyncio.sleep(0)
    coordinator.reset()
    await coordinator.reset_db([DefiProtocol.AAVE])
    release.set()
    await first

    adapters.aave.fetch_history.assert_awaited_once_with(refresh=True, reset=True)
    assert coordinator.status.get_status(Section.DEFI_LENDING_HISTORY) is Status.LOADED


def test_reset_keeps_status_of_running_sections(adapters):
    coordinator, _, _ = _coordinator(adapters)
    coordinator.status.set_status(Status.LOADING, Section.DEFI_OVERVIEW)
    coordinator.status.set_status(Status.REFRESHING, Section.DEFI_BALANCES)
    coordinator.status.set_status(Status.LOADED, Section.DEFI_LENDING_HISTORY)

    coordinator.reset()

    assert coordinator.status.get_status(Section.DEFI_OVERVIEW) is Status.LOADING
    assert coordinator.status.get_status(Section.DEFI_BALANCES) is Status.REFRESHING
    assert coordinator.status.is_first_load(Section.DEFI_LENDING_HISTORY)
