"""Per-section loading status."""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Status(int, Enum):
    NOT_LOADED = 0
    LOADING = 1
    PARTIALLY_LOADED = 2
    REFRESHING = 3
    LOADED = 4


class Section(str, Enum):
    DEFI_OVERVIEW = "defi_overview"
    DEFI_BALANCES = "defi_balances"
    DEFI_LENDING_HISTORY = "defi_lending_history"
    DEFI_AAVE_BALANCES = "defi_aave_balances"
    DEFI_AAVE_HISTORY = "defi_aave_history"
    DEFI_COMPOUND_BALANCES = "defi_compound_balances"
    DEFI_COMPOUND_HISTORY = "defi_compound_history"
    DEFI_YEARN_VAULTS_BALANCES = "defi_yearn_vaults_balances"
    DEFI_YEARN_VAULTS_HISTORY = "defi_yearn_vaults_history"
    DEFI_YEARN_VAULTS_V2_BALANCES = "defi_yearn_vaults_v2_balances"
    DEFI_YEARN_VAULTS_V2_HISTORY = "defi_yearn_vaults_v2_history"
    DEFI_DSR_BALANCES = "defi_dsr_balances"
    DEFI_DSR_HISTORY = "defi_dsr_history"
    DEFI_MAKERDAO_VAULTS = "defi_makerdao_vaults"
    DEFI_LIQUITY_BALANCES = "defi_liquity_balances"
    DEFI_UNISWAP_BALANCES = "defi_uniswap_balances"
    DEFI_SUSHISWAP_BALANCES = "defi_sushiswap_balances"
    DEFI_BALANCER_BALANCES = "defi_balancer_balances"


IN_FLIGHT = frozenset({Status.LOADING, Status.REFRESHING, Status.PARTIALLY_LOADED})
HAS_DATA = frozenset({Status.LOADED, Status.REFRESHING})


class StatusTracker:
    """Tracks the loading status of every section.

    A single tracker is shared between the engine and the adapters so that the
    summary computations can read each adapter's section. Sections never seen
    report ``Status.NOT_LOADED``.
    """

    def __init__(self, default_section: Section = Section.DEFI_OVERVIEW):
        self.default_section = default_section
        self._statuses: dict[Section, Status] = {}

    def get_status(self, section: Section | None = None) -> Status:
        return self._statuses.get(section or self.default_section, Status.NOT_LOADED)

    def set_status(self, status: Status, section: Section | None = None) -> None:
        section = section or self.default_section
        previous = self.get_status(section)
        self._statuses[section] = status
        logger.debug("Section %s: %s -> %s", section.value, previous.name, status.name)

    def reset_status(self, section: Section | None = None) -> None:
        self._statuses.pop(section or self.default_section, None)

    def is_first_load(self, section: Section | None = None) -> bool:
        return self.get_status(section) == Status.NOT_LOADED

    def loading(self, section: Section | None = None) -> bool:
        """Whether a fetch for the section is currently in flight."""
        return self.get_status(section) in IN_FLIGHT

    def has_data(self, section: Section | None = None) -> bool:
        return self.get_status(section) in HAS_DATA

    def fetch_disabled(self, refresh: bool, section: Section | None = None) -> bool:
        """Guard against redundant fetches.

        A fetch goes ahead on the first load or on an explicit refresh, and never
        while another fetch for the same section is in flight.
        """
        return not (self.is_first_load(section) or refresh) or self.loading(section)
