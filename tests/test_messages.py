"""Tests for the message catalog and notification sinks."""

from __future__ import annotations

import logging

from rich.console import Console

from defi_overview.messages import translate
from defi_overview.notifications import ConsoleNotifier, LoggingNotifier, Notification


def test_translate_formats_params():
    assert (
        translate("actions.defi.protocol_balances.error.description", protocol="Aave", error="boom")
        == "Failed to fetch Aave balances: boom"
    )


def test_translate_returns_unknown_keys():
    assert translate("no.such.key") == "no.such.key"


def test_logging_notifier_levels(caplog):
    notifier = LoggingNotifier()

    with caplog.at_level(logging.WARNING, logger="defi_overview.notifications"):
        notifier.notify(Notification(title="t", message="shown", display=True))
        notifier.notify(Notification(title="t", message="quiet"))

    levels = {record.getMessage(): record.levelno for record in caplog.records}
    assert levels["t: shown"] == logging.ERROR
    assert levels["t: quiet"] == logging.WARNING


def test_console_notifier_prints_only_displayed():
    console = Console(record=True, width=80)
    notifier = ConsoleNotifier(console)

    notifier.notify(Notification(title="DeFi balances", message="went wrong", display=True))
    notifier.notify(Notification(title="Hidden", message="not printed"))

    output = console.export_text()
    assert "went wrong" in output
    assert "not printed" not in output
