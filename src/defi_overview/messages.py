"""User-facing message catalog."""

from __future__ import annotations

from typing import Any, Protocol

MESSAGES: dict[str, str] = {
    "defi_overview.multiple_assets": "Multiple Assets",
    "actions.defi.balances.task.title": "Fetching DeFi balances",
    "actions.defi.balances.error.title": "DeFi balances",
    "actions.defi.balances.error.description": "Failed to fetch DeFi balances: {error}",
    "actions.defi.protocol_balances.task.title": "Fetching {protocol} balances",
    "actions.defi.protocol_history.task.title": "Fetching {protocol} history",
    "actions.defi.protocol_balances.error.title": "{protocol} balances",
    "actions.defi.protocol_balances.error.description": "Failed to fetch {protocol} balances: {error}",
    "actions.defi.protocol_history.error.title": "{protocol} history",
    "actions.defi.protocol_history.error.description": "Failed to fetch {protocol} history: {error}",
}


class Translator(Protocol):
    def __call__(self, key: str, **params: Any) -> str: ...


def translate(key: str, **params: Any) -> str:
    """Look up ``key`` in the catalog and format it with ``params``.

    Unknown keys are returned as-is so a missing entry is visible rather than fatal.
    """
    template = MESSAGES.get(key, key)
    return template.format(**params) if params else template
