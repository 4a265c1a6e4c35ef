"""DeFi balance aggregation and fetch orchestration."""

from __future__ import annotations

from .engine import DefiEngine
from .status import Section, Status, StatusTracker

__all__ = ["DefiEngine", "Section", "Status", "StatusTracker"]
