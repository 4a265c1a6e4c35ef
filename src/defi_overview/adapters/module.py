"""Generic task-backed protocol adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..clients.tasks import TaskError, TaskMeta, TaskRequest, TaskRunner, TaskType
from ..domain.modules import Module
from ..messages import Translator, translate
from ..notifications import Notification, Notifier
from ..status import Section, Status, StatusTracker
from .base import DefiAdapters, HistoryState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModuleEndpoints:
    """Backend routes of one module.

    ``balances_key``/``history_key`` select the address-indexed part of a nested
    payload, e.g. the ``balances`` of the DSR response. ``owner_field`` groups a
    list of balance records by the address stored in that field.
    """

    name: str
    balances_section: Section
    balances_path: str | None = None
    history_section: Section | None = None
    history_path: str | None = None
    balances_key: str | None = None
    history_key: str | None = None
    owner_field: str | None = None


class ModuleAdapter:
    """Owns one module's balance and history state.

    Fetches go through the task runner, are guarded by the module's own status
    sections and report failures through the notifier instead of raising.
    """

    def __init__(
        self,
        module: Module,
        endpoints: ModuleEndpoints,
        runner: TaskRunner,
        status: StatusTracker,
        notifier: Notifier,
        translate: Translator = translate,
    ):
        self.module = module
        self.endpoints = endpoints
        self.runner = runner
        self.status = status
        self.notifier = notifier
        self.translate = translate
        self.raw_balances: Any = {}
        self.raw_history: Any = {}

    @property
    def name(self) -> str:
        return self.endpoints.name

    @property
    def balances(self) -> Mapping[str, Any]:
        data = _unwrap(self.raw_balances, self.endpoints.balances_key)
        owner_field = self.endpoints.owner_field
        if isinstance(data, list) and owner_field is not None:
            grouped: dict[str, list[Any]] = {}
            for record in data:
                grouped.setdefault(record[owner_field], []).append(record)
            return grouped
        return data if isinstance(data, Mapping) else {}

    @property
    def history(self) -> HistoryState:
        data = _unwrap(self.raw_history, self.endpoints.history_key)
        return data if isinstance(data, (Mapping, list)) else {}

    async def fetch_balances(self, refresh: bool = False) -> None:
        path = self.endpoints.balances_path
        if path is None:
            return
        self.raw_balances = await self._fetch(
            path,
            self.endpoints.balances_section,
            TaskType.PROTOCOL_BALANCES,
            "protocol_balances",
            refresh,
            {},
            self.raw_balances,
        )

    async def fetch_history(self, refresh: bool = False, reset: bool = False) -> None:
        path = self.endpoints.history_path
        section = self.endpoints.history_section
        if path is None or section is None:
            return
        payload = {"reset_db_data": True} if reset else {}
        self.raw_history = await self._fetch(
            path,
            section,
            TaskType.PROTOCOL_HISTORY,
            "protocol_history",
            refresh,
            payload,
            self.raw_history,
        )

    async def _fetch(
        self,
        path: str,
        section: Section,
        task_type: TaskType,
        message_key: str,
        refresh: bool,
        payload: dict[str, Any],
        current: Any,
    ) -> Any:
        if self.status.fetch_disabled(refresh, section):
            logger.debug("Skipping %s fetch for %s", message_key, self.name)
            return current

        self.status.set_status(Status.REFRESHING if refresh else Status.LOADING, section)
        try:
            task_id = await self.runner.submit(TaskRequest("GET", path, payload))
            meta = TaskMeta(
                title=self.translate(
                    f"actions.defi.{message_key}.task.title", protocol=self.name
                )
            )
            outcome = await self.runner.await_task(task_id, task_type, meta)
            return outcome.result if outcome.result is not None else {}
        except TaskError as e:
            logger.error("%s fetch failed for %s: %s", message_key, self.name, e)
            self.notifier.notify(
                Notification(
                    title=self.translate(
                        f"actions.defi.{message_key}.error.title", protocol=self.name
                    ),
                    message=self.translate(
                        f"actions.defi.{message_key}.error.description",
                        protocol=self.name,
                        error=str(e),
                    ),
                    display=True,
                )
            )
            return current
        finally:
            self.status.set_status(Status.LOADED, section)

    def reset(self) -> None:
        self.raw_balances = {}
        self.raw_history = {}
        for section in (self.endpoints.balances_section, self.endpoints.history_section):
            if section is not None and not self.status.loading(section):
                self.status.reset_status(section)
        logger.debug("Reset %s", self.name)


def _unwrap(data: Any, key: str | None) -> Any:
    if key is None:
        return data
    if isinstance(data, Mapping):
        return data.get(key, {})
    return {}


_MODULES = "blockchains/eth/modules"

MODULE_ENDPOINTS: dict[Module, ModuleEndpoints] = {
    Module.AAVE: ModuleEndpoints(
        name="Aave",
        balances_section=Section.DEFI_AAVE_BALANCES,
        balances_path=f"{_MODULES}/aave/balances",
        history_section=Section.DEFI_AAVE_HISTORY,
        history_path=f"{_MODULES}/aave/history",
    ),
    Module.COMPOUND: ModuleEndpoints(
        name="Compound",
        balances_section=Section.DEFI_COMPOUND_BALANCES,
        balances_path=f"{_MODULES}/compound/balances",
        history_section=Section.DEFI_COMPOUND_HISTORY,
        history_path=f"{_MODULES}/compound/history",
        history_key="events",
    ),
    Module.YEARN: ModuleEndpoints(
        name="yearn.finance • Vaults",
        balances_section=Section.DEFI_YEARN_VAULTS_BALANCES,
        balances_path=f"{_MODULES}/yearn/vaults/balances",
        history_section=Section.DEFI_YEARN_VAULTS_HISTORY,
        history_path=f"{_MODULES}/yearn/vaults/history",
    ),
    Module.YEARN_V2: ModuleEndpoints(
        name="yearn.finance • Vaults v2",
        balances_section=Section.DEFI_YEARN_VAULTS_V2_BALANCES,
        balances_path=f"{_MODULES}/yearn/vaultsv2/balances",
        history_section=Section.DEFI_YEARN_VAULTS_V2_HISTORY,
        history_path=f"{_MODULES}/yearn/vaultsv2/history",
    ),
    Module.MAKERDAO_DSR: ModuleEndpoints(
        name="MakerDAO DSR",
        balances_section=Section.DEFI_DSR_BALANCES,
        balances_path=f"{_MODULES}/makerdao/dsrbalance",
        history_section=Section.DEFI_DSR_HISTORY,
        history_path=f"{_MODULES}/makerdao/dsrhistory",
        balances_key="balances",
    ),
    Module.MAKERDAO_VAULTS: ModuleEndpoints(
        name="MakerDAO Vaults",
        balances_section=Section.DEFI_MAKERDAO_VAULTS,
        balances_path=f"{_MODULES}/makerdao/vaults",
        owner_field="owner",
    ),
    Module.LIQUITY: ModuleEndpoints(
        name="Liquity",
        balances_section=Section.DEFI_LIQUITY_BALANCES,
        balances_path=f"{_MODULES}/liquity/balances",
    ),
    Module.UNISWAP: ModuleEndpoints(
        name="Uniswap",
        balances_section=Section.DEFI_UNISWAP_BALANCES,
        balances_path=f"{_MODULES}/uniswap/v2/balances",
    ),
    Module.SUSHISWAP: ModuleEndpoints(
        name="Sushiswap",
        balances_section=Section.DEFI_SUSHISWAP_BALANCES,
        balances_path=f"{_MODULES}/sushiswap/balances",
    ),
    Module.BALANCER: ModuleEndpoints(
        name="Balancer",
        balances_section=Section.DEFI_BALANCER_BALANCES,
        balances_path=f"{_MODULES}/balancer/balances",
    ),
}


def build_adapters(
    runner: TaskRunner,
    status: StatusTracker,
    notifier: Notifier,
    translate: Translator = translate,
) -> DefiAdapters:
    """Create a task-backed adapter for every module."""

    def make(module: Module) -> ModuleAdapter:
        return ModuleAdapter(
            module, MODULE_ENDPOINTS[module], runner, status, notifier, translate
        )

    return DefiAdapters(
        aave=make(Module.AAVE),
        compound=make(Module.COMPOUND),
        yearn_vaults=make(Module.YEARN),
        yearn_vaults_v2=make(Module.YEARN_V2),
        makerdao_dsr=make(Module.MAKERDAO_DSR),
        makerdao_vaults=make(Module.MAKERDAO_VAULTS),
        liquity=make(Module.LIQUITY),
        uniswap=make(Module.UNISWAP),
        sushiswap=make(Module.SUSHISWAP),
        balancer=make(Module.BALANCER),
    )
