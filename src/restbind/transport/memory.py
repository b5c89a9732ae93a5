"""In-memory transport whose responses are released explicitly with ``flush()``.

Useful for tests and demos that need to control when, and in which order,
asynchronous responses arrive.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from restbind.core.ports.transport import TransportError, compose_url

logger = logging.getLogger(__name__)

# Loop iterations needed for a resolved request to run its callers to completion
_SETTLE_ROUNDS = 5


@dataclass(frozen=True)
class RecordedRequest:
    method: str
    url: str
    params: dict[str, Any]
    body: Any


@dataclass(frozen=True)
class CannedResponse:
    status: int
    payload: Any


def _reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


async def _settle() -> None:
    for _ in range(_SETTLE_ROUNDS):
        await asyncio.sleep(0)


class InMemoryTransport:
    """Implements the ``Transport`` protocol against canned responses.

    ``payload`` may be a callable taking the ``RecordedRequest``, e.g. to echo a
    POST body back with a server-assigned id.
    """

    def __init__(self, auto_respond: bool = False) -> None:
        self.auto_respond = auto_respond
        self.routes: dict[tuple[str, str], CannedResponse] = {}
        self.requests: list[RecordedRequest] = []
        self._pending: list[tuple[RecordedRequest, asyncio.Future[Any]]] = []

    def when(
        self,
        method: str,
        url: str,
        payload: Any | Callable[[RecordedRequest], Any] = None,
        status: int = 200,
    ) -> None:
        self.routes[(method.upper(), url)] = CannedResponse(status=status, payload=payload)

    @property
    def pending(self) -> list[RecordedRequest]:
        return [recorded for recorded, _ in self._pending]

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        recorded = RecordedRequest(
            method=method.upper(),
            url=compose_url(path, params),
            params=dict(params or {}),
            body=copy.deepcopy(body),
        )
        self.requests.append(recorded)
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        if self.auto_respond:
            loop.call_soon(self._resolve, recorded, future)
        else:
            self._pending.append((recorded, future))
        return await future

    async def flush(self, reverse: bool = False) -> int:
        """Answer every pending request and return how many were answered.

        Scheduled callers get a chance to send their requests first. Each
        response is processed by its caller before the next one is released.
        """
        await _settle()
        count = 0
        while self._pending:
            batch, self._pending = self._pending, []
            if reverse:
                batch.reverse()
            for recorded, future in batch:
                self._resolve(recorded, future)
                count += 1
                await _settle()
        return count

    async def aclose(self) -> None:
        pass

    def _resolve(self, recorded: RecordedRequest, future: asyncio.Future[Any]) -> None:
        if future.done():
            return
        response = self.routes.get((recorded.method, recorded.url))
        if response is None:
            logger.debug("No canned response for %s %s", recorded.method, recorded.url)
            future.set_exception(
                TransportError(404, f"No response defined for {recorded.method} {recorded.url}")
            )
            return

        payload = response.payload(recorded) if callable(response.payload) else copy.deepcopy(response.payload)
        if response.status >= 400:
            future.set_exception(TransportError(response.status, _reason(response.status), payload))
        else:
            future.set_result(payload)
