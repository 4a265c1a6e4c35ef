"""Protocol identifiers, display names and icons."""

from __future__ import annotations

from enum import Enum


class Blockchain(str, Enum):
    ETH = "ETH"


class DefiProtocol(str, Enum):
    MAKERDAO_DSR = "makerdao_dsr"
    MAKERDAO_VAULTS = "makerdao_vaults"
    AAVE = "aave"
    COMPOUND = "compound"
    YEARN_VAULTS = "yearn_vaults"
    YEARN_VAULTS_V2 = "yearn_vaults_v2"
    UNISWAP = "uniswap"
    LIQUITY = "liquity"


class ProtocolVersion(str, Enum):
    V1 = "V1"
    V2 = "V2"


# Display names as reported by the overview payload
AAVE = "Aave"
COMPOUND = "Compound"
YEARN_FINANCE_VAULTS = "yearn.finance • Vaults"
YEARN_FINANCE_VAULTS_V2 = "yearn.finance • Vaults v2"
LIQUITY = "Liquity"
MAKERDAO_DSR = "MakerDAO DSR"
MAKERDAO_VAULTS = "MakerDAO Vaults"
UNISWAP = "Uniswap"

DISPLAY_NAMES: dict[DefiProtocol, str] = {
    DefiProtocol.AAVE: AAVE,
    DefiProtocol.COMPOUND: COMPOUND,
    DefiProtocol.YEARN_VAULTS: YEARN_FINANCE_VAULTS,
    DefiProtocol.YEARN_VAULTS_V2: YEARN_FINANCE_VAULTS_V2,
    DefiProtocol.LIQUITY: LIQUITY,
    DefiProtocol.MAKERDAO_DSR: MAKERDAO_DSR,
    DefiProtocol.MAKERDAO_VAULTS: MAKERDAO_VAULTS,
    DefiProtocol.UNISWAP: UNISWAP,
}

_ICONS: dict[str, str] = {
    AAVE.lower(): "aave.svg",
    COMPOUND.lower(): "compound.svg",
    YEARN_FINANCE_VAULTS.lower(): "yearn_vaults.svg",
    YEARN_FINANCE_VAULTS_V2.lower(): "yearn_vaults.svg",
    LIQUITY.lower(): "liquity.png",
    MAKERDAO_DSR.lower(): "makerdao.svg",
    MAKERDAO_VAULTS.lower(): "makerdao.svg",
    UNISWAP.lower(): "uniswap.svg",
}

ICON_BASE_PATH = "./assets/images/defi"


def resolve_protocol(name: str) -> DefiProtocol | None:
    """Map a payload protocol name onto a known protocol, case-insensitively.

    Both display names ("Aave") and identifiers ("aave") are accepted.
    """
    needle = name.strip().lower()
    for protocol, display in DISPLAY_NAMES.items():
        if needle in (display.lower(), protocol.value):
            return protocol
    return None


def get_protocol_icon(name: str) -> str:
    icon = _ICONS.get(name.lower())
    if icon is None:
        slug = "_".join(name.lower().replace("•", " ").split())
        icon = f"{slug}.svg"
    return f"{ICON_BASE_PATH}/{icon}"
