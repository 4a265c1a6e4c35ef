from __future__ import annotations

from .context import DefiState
from .fetch import FetchOrchestrator
from .reset import ResetCoordinator

__all__ = ["DefiState", "FetchOrchestrator", "ResetCoordinator"]
