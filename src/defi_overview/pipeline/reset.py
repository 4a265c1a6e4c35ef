"""Reset of the aggregated state and the per-module adapters."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection

from ..adapters.base import DefiAdapters, Resettable
from ..domain.modules import (
    DECENTRALIZED_EXCHANGES,
    Module,
    ResetGroup,
    ResetTarget,
)
from ..domain.protocols import DefiProtocol
from ..premium import PremiumEntitlement
from ..status import Section, Status, StatusTracker
from .context import DefiState

logger = logging.getLogger(__name__)

# Sections owned by the engine itself rather than by an adapter
ENGINE_SECTIONS: tuple[Section, ...] = (
    Section.DEFI_OVERVIEW,
    Section.DEFI_BALANCES,
    Section.DEFI_LENDING_HISTORY,
)


def _resolve_target(target: ResetTarget | str) -> ResetTarget | None:
    if isinstance(target, (Module, ResetGroup)):
        return target
    for kind in (Module, ResetGroup):
        try:
            return kind(target)
        except ValueError:
            continue
    return None


class ResetCoordinator:
    def __init__(
        self,
        state: DefiState,
        adapters: DefiAdapters,
        status: StatusTracker,
        premium: PremiumEntitlement,
        airdrops: Resettable,
    ):
        self.state = state
        self.adapters = adapters
        self.status = status
        self.premium = premium
        self.airdrops = airdrops

    async def reset_db(self, protocols: Collection[DefiProtocol]) -> None:
        """Recompute the stored history of the requested premium protocols.

        No-op without premium or while a reset is already running. All history
        fetches must succeed; the first failure is raised once they are started.
        """
        section = Section.DEFI_LENDING_HISTORY
        if not self.premium.value or self.status.loading(section):
            logger.debug(
                "History reset skipped (premium=%s, status=%s)",
                self.premium.value,
                self.status.get_status(section).name,
            )
            return

        self.status.set_status(Status.REFRESHING, section)
        try:
            pending = [
                fetcher.fetch_history(refresh=True, reset=True)
                for protocol, fetcher in self.adapters.history_fetchers().items()
                if protocol in protocols and fetcher is not None
            ]
            logger.info("Resetting history for %d protocols", len(pending))
            await asyncio.gather(*pending)
        finally:
            self.status.set_status(Status.LOADED, section)

    def reset_state(self, target: ResetTarget | str) -> None:
        resolved = _resolve_target(target)
        handlers = self.adapters.reset_handlers()

        if resolved is ResetGroup.ALL_DECENTRALIZED_EXCHANGES:
            modules: tuple[Module, ...] = DECENTRALIZED_EXCHANGES
        elif resolved is ResetGroup.ALL_MODULES:
            modules = tuple(handlers)
        elif isinstance(resolved, Module) and handlers.get(resolved) is not None:
            modules = (resolved,)
        else:
            logger.warning(
                "Missing reset function for %s", getattr(target, "value", target)
            )
            return

        for module in modules:
            handler = handlers.get(module)
            if handler is None:
                logger.debug("Module %s has no adapter, nothing to reset", module.value)
                continue
            handler.reset()

    def reset(self) -> None:
        """Drop all aggregated data and return every module to its initial state.

        Sections with a run still in flight keep their status; the run settles
        them itself.
        """
        self.state.clear()
        self.airdrops.reset()
        for section in ENGINE_SECTIONS:
            if not self.status.loading(section):
                self.status.reset_status(section)
        self.reset_state(ResetGroup.ALL_MODULES)
        logger.info("DeFi state reset")
