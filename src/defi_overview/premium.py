"""Premium entitlement flag and the airdrop collaborator."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

PremiumListener = Callable[[bool, bool], None]


class PremiumEntitlement:
    """Observable premium flag.

    Listeners are called with ``(previous, current)`` after every change.
    """

    def __init__(self, value: bool = False):
        self._value = value
        self._listeners: list[PremiumListener] = []

    @property
    def value(self) -> bool:
        return self._value

    def set(self, value: bool) -> None:
        previous = self._value
        if previous == value:
            return
        self._value = value
        logger.info("Premium entitlement changed: %s -> %s", previous, value)
        for listener in list(self._listeners):
            listener(previous, value)

    def subscribe(self, listener: PremiumListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe


class AirdropTracker:
    """Holds airdrop data that is discarded together with the DeFi state."""

    def __init__(self) -> None:
        self.airdrops: dict[str, Any] = {}

    def reset(self) -> None:
        self.airdrops = {}
