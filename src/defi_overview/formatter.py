"""Rich console rendering of the overview and the DeFi accounts."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .domain.models import ZERO, DefiAccount, DefiProtocolSummary


def _format_usd(value: Decimal | None) -> str:
    if value is None:
        return "[dim]-[/]"
    return f"${value:,.2f}"


def _truncate_address(address: str) -> str:
    if len(address) <= 16:
        return address
    return f"{address[:10]}...{address[-4:]}"


def format_overview_table(
    summaries: list[DefiProtocolSummary],
    console: Console | None = None,
) -> None:
    """Print the overview as a rich table."""
    console = console or Console()

    table = Table(expand=True, show_lines=False)
    table.add_column("Protocol", style="cyan", no_wrap=True)
    table.add_column("Token", style="dim")
    table.add_column("Balance", justify="right", style="green")
    table.add_column("Deposits", justify="right")
    table.add_column("Collateral", justify="right")
    table.add_column("Debt", justify="right", style="red")

    total_balance = ZERO
    total_deposits = ZERO
    total_debt = ZERO
    for summary in summaries:
        token = ""
        if summary.token_info is not None:
            token = summary.token_info.token_name
            if summary.token_info.token_symbol:
                token = f"{token} ({summary.token_info.token_symbol})"

        total_balance += summary.balance_usd or ZERO
        total_deposits += summary.total_lending_deposit_usd
        total_debt += summary.total_debt_usd

        table.add_row(
            summary.protocol.name,
            token,
            _format_usd(summary.balance_usd),
            _format_usd(summary.total_lending_deposit_usd) if summary.deposits else "",
            _format_usd(summary.total_collateral_usd) if summary.liabilities else "",
            _format_usd(summary.total_debt_usd) if summary.liabilities else "",
        )

    table.add_row(
        "[bold]TOTAL[/]",
        "",
        f"[bold]{_format_usd(total_balance)}[/]",
        f"[bold]{_format_usd(total_deposits)}[/]",
        "",
        f"[bold]{_format_usd(total_debt)}[/]",
        style="bold",
    )

    console.print(
        Panel(table, title="[bold]DeFi Overview[/]", border_style="cyan")
    )


def format_accounts_table(
    accounts: list[DefiAccount],
    console: Console | None = None,
) -> None:
    console = console or Console()

    table = Table(expand=True)
    table.add_column("Address", style="cyan", no_wrap=True)
    table.add_column("Chain", style="dim")
    table.add_column("Protocols")
    for account in accounts:
        table.add_row(
            _truncate_address(account.address),
            account.chain.value,
            ", ".join(protocol.value for protocol in account.protocols),
        )

    console.print(
        Panel(table, title="[bold]DeFi Accounts[/]", border_style="blue")
    )
