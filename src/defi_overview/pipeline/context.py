from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..domain.models import ProtocolsSnapshot, freeze_protocols

logger = logging.getLogger(__name__)

StateListener = Callable[[ProtocolsSnapshot], None]


class DefiState:
    """Holds the raw overview balances shared by the fetch and reset flows.

    The snapshot is only ever swapped as a whole, so readers never observe a
    partial update. Listeners are called after every swap.
    """

    def __init__(self) -> None:
        self._all_protocols: ProtocolsSnapshot = freeze_protocols({})
        self._listeners: list[StateListener] = []

    @property
    def all_protocols(self) -> ProtocolsSnapshot:
        return self._all_protocols

    def replace(self, protocols: Mapping[str, Any]) -> None:
        self._all_protocols = freeze_protocols(protocols)
        logger.debug("Replaced DeFi balances for %d addresses", len(protocols))
        self._publish()

    def clear(self) -> None:
        self.replace({})

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._all_protocols)
            except Exception:
                logger.exception("DeFi state listener %r failed", listener)
