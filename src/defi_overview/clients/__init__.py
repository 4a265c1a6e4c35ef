from __future__ import annotations

from .tasks import (
    ALL_DEFI_REQUEST,
    HttpTaskRunner,
    TaskError,
    TaskMeta,
    TaskRequest,
    TaskResult,
    TaskRunner,
    TaskType,
)

__all__ = [
    "ALL_DEFI_REQUEST",
    "HttpTaskRunner",
    "TaskError",
    "TaskMeta",
    "TaskRequest",
    "TaskResult",
    "TaskRunner",
    "TaskType",
]
