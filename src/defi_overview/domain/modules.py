"""Resettable modules and the reset-request shorthands."""

from __future__ import annotations

from enum import Enum


class Module(str, Enum):
    MAKERDAO_DSR = "makerdao_dsr"
    MAKERDAO_VAULTS = "makerdao_vaults"
    AAVE = "aave"
    COMPOUND = "compound"
    YEARN = "yearn_vaults"
    YEARN_V2 = "yearn_vaults_v2"
    UNISWAP = "uniswap"
    SUSHISWAP = "sushiswap"
    BALANCER = "balancer"
    LIQUITY = "liquity"


class ResetGroup(str, Enum):
    """Reset shorthands. These are not modules themselves."""

    ALL_MODULES = "all"
    ALL_DECENTRALIZED_EXCHANGES = "decentralized_exchanges"


ALL_MODULES = ResetGroup.ALL_MODULES
ALL_DECENTRALIZED_EXCHANGES = ResetGroup.ALL_DECENTRALIZED_EXCHANGES

DECENTRALIZED_EXCHANGES: tuple[Module, ...] = (
    Module.UNISWAP,
    Module.SUSHISWAP,
    Module.BALANCER,
)

ResetTarget = Module | ResetGroup
