from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from restbind.core.ports.transport import TransportError

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> tuple[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return response.reason_phrase, response.text or None
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"]), payload
    return response.reason_phrase, payload


class HttpxTransport:
    """``Transport`` implementation backed by ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = await self._client.request(
                method,
                path,
                params=query or None,
                json=body,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(0, str(exc) or type(exc).__name__) from exc

        if response.status_code >= 400:
            reason, payload = _error_detail(response)
            raise TransportError(response.status_code, reason, payload)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(response.status_code, "Response body is not valid JSON", response.text) from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
