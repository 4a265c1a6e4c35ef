"""CLI entrypoint for defi-overview."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer

from .adapters.module import build_adapters
from .clients.tasks import HttpTaskRunner
from .domain.protocols import DefiProtocol
from .engine import DefiEngine
from .formatter import format_accounts_table, format_overview_table
from .logger import setup_logging
from .notifications import ConsoleNotifier
from .premium import PremiumEntitlement
from .settings import CONFIG_ENV_VAR, DefiSettings, OutputFormat
from .state import AppState
from .status import StatusTracker

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Aggregated DeFi balances from a rotki-compatible backend.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to a TOML config file (can include [defi_overview] table).",
    ),
]
ApiUrlOption = Annotated[
    str | None,
    typer.Option("--api-url", help="Backend API base URL."),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    ),
]
FormatOption = Annotated[
    OutputFormat | None,
    typer.Option("--format", "-f", help="Output format (table or json)."),
]


def _load_state(
    config_path: Path | None,
    api_url: str | None,
    log_level: str | None,
    output_format: OutputFormat | None = None,
) -> AppState:
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, str | OutputFormat] = {}
    if api_url is not None:
        init_kwargs["api_url"] = api_url
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()
    if output_format is not None:
        init_kwargs["output_format"] = output_format

    settings = DefiSettings(**init_kwargs)
    setup_logging(settings.log_level)
    return AppState(settings=settings, logger=logging.getLogger("defi_overview"))


def build_engine(settings: DefiSettings) -> DefiEngine:
    """Wire the HTTP task runner and the module adapters into an engine."""
    status = StatusTracker()
    notifier = ConsoleNotifier()
    runner = HttpTaskRunner(settings)
    adapters = build_adapters(runner, status, notifier)
    return DefiEngine(
        adapters,
        runner,
        status=status,
        notifier=notifier,
        premium=PremiumEntitlement(settings.premium),
    )


@app.command()
def overview(
    refresh: Annotated[
        bool, typer.Option("--refresh", help="Ignore cached backend results.")
    ] = False,
    output_format: FormatOption = None,
    config_path: ConfigOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
) -> None:
    """Fetch all DeFi balances and print the per-protocol overview."""
    state = _load_state(config_path, api_url, log_level, output_format)

    if show_config:
        typer.echo(json.dumps(state.settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    engine = build_engine(state.settings)
    asyncio.run(engine.fetch_all_defi(refresh))
    summaries = engine.overview

    if state.json_output:
        typer.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
    else:
        format_overview_table(summaries, state.console)


@app.command()
def accounts(
    protocol: Annotated[
        list[DefiProtocol] | None,
        typer.Option("--protocol", "-p", help="Only accounts using this protocol."),
    ] = None,
    output_format: FormatOption = None,
    config_path: ConfigOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Fetch all DeFi balances and list the addresses using each protocol."""
    state = _load_state(config_path, api_url, log_level, output_format)
    engine = build_engine(state.settings)
    asyncio.run(engine.fetch_all_defi())
    found = engine.defi_accounts(protocol or [])

    if state.json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "address": account.address,
                        "chain": account.chain.value,
                        "protocols": [p.value for p in account.protocols],
                    }
                    for account in found
                ],
                indent=2,
            )
        )
    else:
        format_accounts_table(found, state.console)


@app.command("reset-db")
def reset_db(
    protocol: Annotated[
        list[DefiProtocol],
        typer.Option("--protocol", "-p", help="Protocol whose history is recomputed."),
    ],
    config_path: ConfigOption = None,
    api_url: ApiUrlOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Recompute the stored history of premium protocols from scratch."""
    state = _load_state(config_path, api_url, log_level)
    if not state.settings.premium:
        raise typer.BadParameter(
            "premium is required to reset history.",
            param_hint=["DEFI_OVERVIEW_PREMIUM"],
        )

    engine = build_engine(state.settings)
    asyncio.run(engine.reset_db(protocol))
    state.logger.info("History reset finished for %s", ", ".join(p.value for p in protocol))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
