"""DeFi overview engine: read interfaces and operations in one place."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection

from .adapters.base import DefiAdapters, LendingTotals, Resettable
from .adapters.lending import AdapterLendingTotals
from .clients.tasks import TaskRunner
from .domain.models import DefiAccount, DefiProtocolSummary, ProtocolsSnapshot
from .domain.modules import ResetTarget
from .domain.protocols import DefiProtocol
from .messages import Translator, translate
from .notifications import LoggingNotifier, Notifier
from .pipeline.context import DefiState, StateListener
from .pipeline.fetch import FetchOrchestrator
from .pipeline.reset import ResetCoordinator
from .premium import AirdropTracker, PremiumEntitlement
from .processors.accounts import derive_defi_accounts
from .processors.summary import build_overview
from .status import StatusTracker

logger = logging.getLogger(__name__)


class DefiEngine:
    """Aggregates the adapters' DeFi data and coordinates fetching and resets.

    All collaborators are injected. The ``status`` tracker must be the one the
    adapters report their own sections to, otherwise lending summaries never
    see their data as loaded.

    Derived views (``overview``, ``defi_accounts``) are recomputed on every
    read from the current snapshot and adapter state; nothing is cached.
    """

    def __init__(
        self,
        adapters: DefiAdapters,
        runner: TaskRunner,
        *,
        status: StatusTracker | None = None,
        lending: LendingTotals | None = None,
        notifier: Notifier | None = None,
        premium: PremiumEntitlement | None = None,
        airdrops: Resettable | None = None,
        translate: Translator = translate,
    ):
        self.adapters = adapters
        self.status = status if status is not None else StatusTracker()
        self.lending = lending if lending is not None else AdapterLendingTotals(adapters)
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self.premium = premium if premium is not None else PremiumEntitlement()
        self.airdrops = airdrops if airdrops is not None else AirdropTracker()
        self.translate = translate

        self.state = DefiState()
        self.fetcher = FetchOrchestrator(
            self.state, adapters, self.status, runner, self.notifier, translate
        )
        self.resetter = ResetCoordinator(
            self.state, adapters, self.status, self.premium, self.airdrops
        )
        self._unsubscribe_premium = self.premium.subscribe(self._on_premium_change)

    # --- read interfaces ---

    @property
    def all_protocols(self) -> ProtocolsSnapshot:
        return self.state.all_protocols

    @property
    def overview(self) -> list[DefiProtocolSummary]:
        return self.recompute_overview()

    def recompute_overview(self) -> list[DefiProtocolSummary]:
        return build_overview(
            self.state.all_protocols, self.status, self.lending, self.translate
        )

    def defi_accounts(
        self, protocols: Collection[DefiProtocol] = ()
    ) -> list[DefiAccount]:
        return derive_defi_accounts(self.adapters.address_sources(), protocols)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new snapshot whenever it is replaced."""
        return self.state.subscribe(listener)

    # --- operations ---

    async def fetch_defi_balances(self, refresh: bool = False) -> None:
        await self.fetcher.fetch_defi_balances(refresh)

    async def fetch_all_defi(self, refresh: bool = False) -> None:
        await self.fetcher.fetch_all_defi(refresh)

    async def reset_db(self, protocols: Collection[DefiProtocol]) -> None:
        await self.resetter.reset_db(protocols)

    def reset_state(self, target: ResetTarget | str) -> None:
        self.resetter.reset_state(target)

    def reset(self) -> None:
        self.resetter.reset()

    def close(self) -> None:
        """Stop reacting to premium changes."""
        self._unsubscribe_premium()

    def _on_premium_change(self, previous: bool, current: bool) -> None:
        # Only a revoked entitlement forces a reset; granting one changes nothing
        if previous and not current:
            logger.info("Premium entitlement revoked, resetting DeFi state")
            self.reset()
