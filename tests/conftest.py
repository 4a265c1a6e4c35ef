from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from defi_overview.adapters.base import DefiAdapters
from defi_overview.clients.tasks import TaskRequest, TaskResult, TaskType
from defi_overview.domain.models import ZERO, LoanSummary, ProtocolBalanceEntry
from defi_overview.notifications import Notification
from defi_overview.status import StatusTracker


def make_entry(
    protocol: str,
    token_address: str = "0xT",
    token_name: str = "Dai",
    token_symbol: str = "DAI",
    amount: str | int = 0,
    usd_value: str | int = 0,
    balance_type: str = "Asset",
) -> ProtocolBalanceEntry:
    return ProtocolBalanceEntry.model_validate(
        {
            "protocol": {"name": protocol},
            "baseBalance": {
                "tokenAddress": token_address,
                "tokenName": token_name,
                "tokenSymbol": token_symbol,
                "balance": {"amount": str(amount), "usdValue": str(usd_value)},
            },
            "balanceType": balance_type,
        }
    )


def make_adapter(
    name: str = "adapter",
    balances: dict[str, Any] | None = None,
    history: Any = None,
) -> MagicMock:
    adapter = MagicMock()
    adapter.name = name
    adapter.balances = balances or {}
    adapter.history = history if history is not None else {}
    adapter.fetch_balances = AsyncMock()
    adapter.fetch_history = AsyncMock()
    return adapter


class FakeTaskRunner:
    """Resolves every task with ``result`` (or raises ``error``) after ``gate`` opens."""

    def __init__(self, result: Any = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.submitted: list[TaskRequest] = []
        self.gate = asyncio.Event()
        self.gate.set()

    async def submit(self, request: TaskRequest) -> int:
        self.submitted.append(request)
        return len(self.submitted)

    async def await_task(self, task_id, task_type: TaskType, meta=None) -> TaskResult:
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return TaskResult(task_id=task_id, task_type=task_type, result=self.result, meta=meta)


class FakeLending:
    def __init__(
        self,
        loans: dict | None = None,
        deposits: dict | None = None,
    ):
        self.loans = loans or {}
        self.deposits = deposits or {}
        self.loan_calls: list[list] = []
        self.deposit_calls: list[list] = []

    def loan_summary(self, protocols) -> LoanSummary:
        self.loan_calls.append(list(protocols))
        collateral = ZERO
        debt = ZERO
        for protocol in protocols:
            loan = self.loans.get(protocol, LoanSummary())
            collateral += loan.total_collateral_usd
            debt += loan.total_debt
        return LoanSummary(total_collateral_usd=collateral, total_debt=debt)

    def total_lending_deposit(self, protocols, addresses) -> Decimal:
        self.deposit_calls.append(list(protocols))
        return sum((self.deposits.get(p, ZERO) for p in protocols), ZERO)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


@pytest.fixture
def status():
    return StatusTracker()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def adapters():
    return DefiAdapters(
        aave=make_adapter("Aave"),
        compound=make_adapter("Compound"),
        yearn_vaults=make_adapter("yearn.finance • Vaults"),
        yearn_vaults_v2=make_adapter("yearn.finance • Vaults v2"),
        makerdao_dsr=make_adapter("MakerDAO DSR"),
        makerdao_vaults=make_adapter("MakerDAO Vaults"),
        liquity=make_adapter("Liquity"),
        uniswap=make_adapter("Uniswap"),
        sushiswap=make_adapter("Sushiswap"),
        balancer=make_adapter("Balancer"),
    )
