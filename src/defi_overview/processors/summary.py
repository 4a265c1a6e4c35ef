"""Fold raw per-address protocol balances into one summary per protocol."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..adapters.base import LendingTotals
from ..domain.models import (
    ZERO,
    AssetBalance,
    BalanceType,
    DefiProtocolSummary,
    LoanSummary,
    ProtocolBalanceEntry,
    ProtocolInfo,
    TokenInfo,
)
from ..domain.protocols import (
    DISPLAY_NAMES,
    DefiProtocol,
    get_protocol_icon,
    resolve_protocol,
)
from ..messages import Translator, translate
from ..status import Section, StatusTracker

MULTIPLE_ASSETS_KEY = "defi_overview.multiple_assets"


@dataclass(frozen=True)
class LendingProtocol:
    """Summarizer configuration for a protocol whose totals come from lending data.

    Attributes:
        section: Status section that must hold data before the summary is built
        no_liabilities: Deposit-only protocol; collateral and debt stay zero
        no_deposits: Liability-only protocol; lending deposit stays zero
        always_listed: Summarized even without raw balance entries, once the
            overview itself has loaded
        url_protocol: Protocol parameter used in the deposit/liability links
    """

    section: Section
    no_liabilities: bool = False
    no_deposits: bool = False
    always_listed: bool = False
    url_protocol: str | None = None


LENDING_PROTOCOLS: dict[DefiProtocol, LendingProtocol] = {
    DefiProtocol.AAVE: LendingProtocol(Section.DEFI_AAVE_BALANCES),
    DefiProtocol.COMPOUND: LendingProtocol(Section.DEFI_COMPOUND_BALANCES),
    DefiProtocol.YEARN_VAULTS: LendingProtocol(
        Section.DEFI_YEARN_VAULTS_BALANCES, no_liabilities=True
    ),
    DefiProtocol.LIQUITY: LendingProtocol(
        Section.DEFI_LIQUITY_BALANCES, no_deposits=True
    ),
    DefiProtocol.MAKERDAO_DSR: LendingProtocol(
        Section.DEFI_OVERVIEW,
        no_liabilities=True,
        always_listed=True,
        url_protocol="makerdao",
    ),
    DefiProtocol.MAKERDAO_VAULTS: LendingProtocol(
        Section.DEFI_OVERVIEW,
        no_deposits=True,
        always_listed=True,
        url_protocol="makerdao",
    ),
    DefiProtocol.YEARN_VAULTS_V2: LendingProtocol(
        Section.DEFI_YEARN_VAULTS_V2_BALANCES,
        no_liabilities=True,
        always_listed=True,
    ),
}


def canonical_name(name: str) -> str:
    protocol = resolve_protocol(name)
    return DISPLAY_NAMES[protocol] if protocol is not None else name


def add_entry(
    summaries: dict[str, DefiProtocolSummary],
    entry: ProtocolBalanceEntry,
    translate: Translator = translate,
) -> DefiProtocolSummary:
    """Accumulate one raw entry into the running per-protocol summaries."""
    name = canonical_name(entry.protocol.name)
    base = entry.base_balance

    summary = summaries.get(name)
    if summary is None:
        summary = DefiProtocolSummary(
            protocol=ProtocolInfo(name=name, icon=get_protocol_icon(name)),
            token_info=TokenInfo(
                token_name=base.token_name, token_symbol=base.token_symbol
            ),
        )
        summaries[name] = summary
    elif summary.token_info is None or summary.token_info.token_name != base.token_name:
        # Collapsed for good: later entries never compare equal to the label
        summary.token_info = TokenInfo(
            token_name=translate(MULTIPLE_ASSETS_KEY), token_symbol=""
        )

    if entry.balance_type is not BalanceType.ASSET:
        return summary

    summary.balance_usd = (summary.balance_usd or ZERO) + base.balance.usd_value
    for asset in summary.assets:
        if asset.token_address == base.token_address:
            asset.amount += base.balance.amount
            asset.usd_value += base.balance.usd_value
            break
    else:
        summary.assets.append(AssetBalance.from_base_balance(base))
    return summary


def accumulate_entries(
    entries: Iterable[ProtocolBalanceEntry],
    translate: Translator = translate,
) -> dict[str, DefiProtocolSummary]:
    summaries: dict[str, DefiProtocolSummary] = {}
    for entry in entries:
        add_entry(summaries, entry, translate)
    return summaries


def lending_summary(
    protocol: DefiProtocol,
    config: LendingProtocol,
    status: StatusTracker,
    lending: LendingTotals,
    spot: DefiProtocolSummary | None = None,
) -> DefiProtocolSummary | None:
    """Summarize a lending protocol, or None while its data is not loaded.

    Spot balances accumulated from raw entries (``spot``) are carried over so
    the lending totals and the wallet-level balances show up together.
    """
    if not status.has_data(config.section):
        return None
    if config.always_listed and not status.has_data(Section.DEFI_OVERVIEW):
        return None

    name = DISPLAY_NAMES[protocol]
    selection = [protocol]
    loan = (
        LoanSummary(total_collateral_usd=ZERO, total_debt=ZERO)
        if config.no_liabilities
        else lending.loan_summary(selection)
    )
    lending_deposit = (
        ZERO if config.no_deposits else lending.total_lending_deposit(selection, [])
    )
    url_protocol = config.url_protocol or protocol.value

    return DefiProtocolSummary(
        protocol=ProtocolInfo(name=name, icon=get_protocol_icon(name)),
        token_info=spot.token_info if spot else None,
        assets=list(spot.assets) if spot else [],
        balance_usd=spot.balance_usd if spot else None,
        deposits=not config.no_deposits,
        liabilities=not config.no_liabilities,
        deposits_url=(
            None if config.no_deposits else f"/defi/deposits?protocol={url_protocol}"
        ),
        liabilities_url=(
            None
            if config.no_liabilities
            else f"/defi/liabilities?protocol={url_protocol}"
        ),
        total_collateral_usd=loan.total_collateral_usd,
        total_debt_usd=loan.total_debt,
        total_lending_deposit_usd=lending_deposit,
    )


def build_overview(
    all_protocols: Mapping[str, Iterable[ProtocolBalanceEntry]],
    status: StatusTracker,
    lending: LendingTotals,
    translate: Translator = translate,
) -> list[DefiProtocolSummary]:
    """Compute the overview from the raw balances and the lending totals.

    Entries are accumulated per protocol first. Lending protocols are applied
    afterwards and replace the accumulated summary under the same name, so
    their outcome never depends on payload order.

    Returns:
        Summaries sorted by protocol name, without protocols that hold no spot
        balance and offer neither deposits nor liabilities
    """
    summaries = accumulate_entries(
        (entry for entries in all_protocols.values() for entry in entries),
        translate,
    )

    for protocol, config in LENDING_PROTOCOLS.items():
        name = DISPLAY_NAMES[protocol]
        spot = summaries.pop(name, None)
        if spot is None and not config.always_listed:
            continue
        summary = lending_summary(protocol, config, status, lending, spot)
        if summary is not None and summary.should_display:
            summaries[name] = summary

    return [
        summary
        for summary in sorted(summaries.values(), key=lambda s: s.protocol.name)
        if summary.balance_usd or summary.deposits or summary.liabilities
    ]
