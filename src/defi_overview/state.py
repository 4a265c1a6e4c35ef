"""Per-invocation CLI state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rich.console import Console

from .settings import DefiSettings, OutputFormat


@dataclass
class AppState:
    """Resolved settings plus the sinks a command writes to.

    Built once per CLI invocation so the commands share no global state.
    """

    settings: DefiSettings
    logger: logging.Logger
    console: Console = field(default_factory=Console)

    @property
    def json_output(self) -> bool:
        return self.settings.output_format == OutputFormat.JSON
