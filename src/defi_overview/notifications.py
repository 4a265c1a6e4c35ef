"""Notification sinks for user-visible failures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from rich.console import Console
from rich.panel import Panel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str
    display: bool = False


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Routes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        level = logging.ERROR if notification.display else logging.WARNING
        logger.log(level, "%s: %s", notification.title, notification.message)


class ConsoleNotifier:
    """Prints displayable notifications as a rich panel on stderr."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def notify(self, notification: Notification) -> None:
        logger.debug("Notification: %s", notification)
        if not notification.display:
            return
        self.console.print(
            Panel(
                notification.message,
                title=f"[bold]{notification.title}[/]",
                border_style="red",
            )
        )
