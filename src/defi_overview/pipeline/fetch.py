"""Overview fetch followed by the fan-out to the protocol adapters."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from ..adapters.base import BalanceFetcher, DefiAdapters
from ..clients.tasks import ALL_DEFI_REQUEST, TaskError, TaskMeta, TaskRunner, TaskType
from ..domain.models import parse_all_defi_protocols
from ..messages import Translator, translate
from ..notifications import Notification, Notifier
from ..status import Section, Status, StatusTracker
from .context import DefiState

logger = logging.getLogger(__name__)


def _process_adapter_results(
    fetchers: Sequence[BalanceFetcher],
    results: Sequence[BaseException | None],
) -> int:
    """Log the outcome of each adapter fetch.

    Adapters report their own failures to the user, so failures are only
    logged here.

    Returns:
        Number of failed adapters
    """
    failures = 0
    for fetcher, result in zip(fetchers, results):
        if isinstance(result, BaseException):
            failures += 1
            logger.error("Adapter '%s' failed: %s", fetcher.name, result)
        else:
            logger.debug("Adapter '%s' settled", fetcher.name)
    return failures


class FetchOrchestrator:
    """Fetches the overview balances and then every adapter's balances.

    Runs are guarded by the status sections: while a run is in flight a second
    request is a no-op. A started run is never cancelled.
    """

    def __init__(
        self,
        state: DefiState,
        adapters: DefiAdapters,
        status: StatusTracker,
        runner: TaskRunner,
        notifier: Notifier,
        translate: Translator = translate,
    ):
        self.state = state
        self.adapters = adapters
        self.status = status
        self.runner = runner
        self.notifier = notifier
        self.translate = translate

    async def fetch_defi_balances(self, refresh: bool = False) -> None:
        """Replace the raw overview balances with a freshly fetched snapshot.

        Failures are turned into a notification; the previous snapshot stays in
        place and the section still ends up LOADED.
        """
        section = Section.DEFI_BALANCES
        if self.status.fetch_disabled(refresh, section):
            logger.debug("DeFi balances fetch skipped (refresh=%s)", refresh)
            return

        self.status.set_status(Status.REFRESHING if refresh else Status.LOADING, section)
        try:
            task_id = await self.runner.submit(ALL_DEFI_REQUEST)
            outcome = await self.runner.await_task(
                task_id,
                TaskType.DEFI_BALANCES,
                TaskMeta(title=self.translate("actions.defi.balances.task.title")),
            )
            protocols = parse_all_defi_protocols(outcome.result)
        except TaskError as e:
            logger.error("DeFi balances fetch failed: %s", e)
            self._notify_failure(e)
        except Exception as e:
            logger.exception("DeFi balances could not be processed")
            self._notify_failure(e)
        else:
            self.state.replace(protocols)

        self.status.set_status(Status.LOADED, section)

    async def fetch_all_defi(self, refresh: bool = False) -> None:
        """Fetch the overview, then settle every adapter's balance fetch."""
        if self.status.fetch_disabled(refresh):
            logger.debug("DeFi fetch skipped (refresh=%s)", refresh)
            return

        self.status.set_status(Status.REFRESHING if refresh else Status.LOADING)
        await self.fetch_defi_balances(refresh)
        self.status.set_status(Status.PARTIALLY_LOADED)

        fetchers = self.adapters.balance_fetchers()
        logger.info("Fetching balances from %d protocol adapters...", len(fetchers))
        results = await asyncio.gather(
            *[fetcher.fetch_balances(refresh) for fetcher in fetchers],
            return_exceptions=True,
        )
        failures = _process_adapter_results(fetchers, results)
        if failures:
            logger.warning("%d of %d adapters failed", failures, len(fetchers))

        self.status.set_status(Status.LOADED)

    def _notify_failure(self, error: Exception) -> None:
        self.notifier.notify(
            Notification(
                title=self.translate("actions.defi.balances.error.title"),
                message=self.translate(
                    "actions.defi.balances.error.description", error=str(error)
                ),
                display=True,
            )
        )
