"""Submit-and-await access to the backend's asynchronous task queue."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import backoff
import requests

from ..settings import DefiSettings

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class TaskType(str, Enum):
    DEFI_BALANCES = "defi_balances"
    PROTOCOL_BALANCES = "protocol_balances"
    PROTOCOL_HISTORY = "protocol_history"


class TaskError(Exception):
    """Raised when a task cannot be submitted or finishes without a result."""

    def __init__(
        self,
        message: str,
        task_id: int | None = None,
        task_type: TaskType | None = None,
    ):
        super().__init__(message)
        self.task_id = task_id
        self.task_type = task_type


@dataclass(frozen=True)
class TaskRequest:
    method: str
    path: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TaskMeta:
    title: str
    description: str | None = None


@dataclass(frozen=True)
class TaskResult:
    task_id: int
    task_type: TaskType
    result: Any
    meta: TaskMeta | None = None


ALL_DEFI_REQUEST = TaskRequest("GET", "blockchains/eth/defi")


class TaskRunner(Protocol):
    async def submit(self, request: TaskRequest) -> int: ...

    async def await_task(
        self,
        task_id: int,
        task_type: TaskType,
        meta: TaskMeta | None = None,
    ) -> TaskResult: ...


def _should_giveup(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRY_STATUSES
    )


def _on_backoff(details: Any) -> None:
    logger.warning(
        "Request failed (attempt %d), retrying in %.1fs: %s",
        details["tries"],
        details["wait"],
        details.get("exception"),
    )


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    message = body.get("message") if isinstance(body, dict) else None
    return message or f"HTTP {response.status_code}"


class HttpTaskRunner:
    """Task runner for a rotki-style REST backend.

    Requests are sent with ``async_query`` set; the backend answers with a task
    id which is then polled at ``/tasks/<id>`` until the outcome is available.
    """

    def __init__(
        self,
        settings: DefiSettings,
        session: requests.Session | None = None,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        if settings.api_key is not None:
            self.session.headers["Authorization"] = (
                f"Bearer {settings.api_key.get_secret_value()}"
            )

    def _url(self, path: str) -> str:
        return f"{self.settings.api_url}/{path.lstrip('/')}"

    async def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.settings.max_retries,
            giveup=_should_giveup,
            on_backoff=_on_backoff,
            jitter=backoff.full_jitter,
        )
        async def _attempt() -> requests.Response:
            response = await asyncio.to_thread(
                self.session.request,
                method,
                url,
                timeout=self.settings.request_timeout,
                **kwargs,
            )
            if response.status_code in RETRY_STATUSES:
                response.raise_for_status()
            return response

        return await _attempt()

    async def submit(self, request: TaskRequest) -> int:
        url = self._url(request.path)
        if request.method.upper() == "GET":
            kwargs: dict[str, Any] = {
                "params": {**request.payload, "async_query": "true"}
            }
        else:
            kwargs = {"json": {**request.payload, "async_query": True}}

        try:
            response = await self._send(request.method.upper(), url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TaskError(f"Could not submit {request.path}: {e}") from e

        if not response.ok:
            raise TaskError(
                f"Could not submit {request.path}: {_error_message(response)}"
            )

        try:
            task_id = int(response.json()["result"]["task_id"])
        except (KeyError, TypeError, ValueError) as e:
            raise TaskError(f"No task id returned for {request.path}") from e

        logger.debug("Submitted %s %s as task %d", request.method, request.path, task_id)
        return task_id

    async def await_task(
        self,
        task_id: int,
        task_type: TaskType,
        meta: TaskMeta | None = None,
    ) -> TaskResult:
        title = meta.title if meta else task_type.value
        logger.info("Waiting for task %d: %s", task_id, title)

        loop = asyncio.get_running_loop()
        timeout = self.settings.task_timeout
        deadline = None if timeout is None else loop.time() + timeout
        url = self._url(f"tasks/{task_id}")

        while True:
            try:
                response = await self._send("GET", url)
                body = response.json()
            except (requests.exceptions.RequestException, ValueError) as e:
                raise TaskError(f"Polling task {task_id} failed: {e}", task_id, task_type) from e

            result = body.get("result") if isinstance(body, dict) else None
            status = result.get("status") if isinstance(result, dict) else None

            if status == "completed":
                outcome = result.get("outcome") or {}
                if outcome.get("result") is None and outcome.get("message"):
                    raise TaskError(outcome["message"], task_id, task_type)
                logger.debug("Task %d completed", task_id)
                return TaskResult(
                    task_id=task_id,
                    task_type=task_type,
                    result=outcome.get("result"),
                    meta=meta,
                )

            if status != "pending":
                raise TaskError(
                    f"Task {task_id} is {status or 'unknown'}: {_error_message(response)}",
                    task_id,
                    task_type,
                )

            if deadline is not None and loop.time() >= deadline:
                raise TaskError(
                    f"Task {task_id} did not finish within {timeout}s",
                    task_id,
                    task_type,
                )
            await asyncio.sleep(self.settings.task_poll_interval)
