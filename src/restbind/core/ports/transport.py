from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlencode


class TransportError(Exception):
    """Raised when a transport request fails.

    ``status`` is the HTTP status code, or ``0`` when no response was received.
    """

    def __init__(self, status: int, reason: str, payload: Any = None) -> None:
        super().__init__(f"{status} {reason}")
        self.status = status
        self.reason = reason
        self.payload = payload


class Transport(Protocol):
    async def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any: ...


def compose_url(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Join ``path`` and ``params`` into ``path?k=v&...`` keeping insertion order."""
    pairs = [(k, v) for k, v in (params or {}).items() if v is not None]
    if not pairs:
        return path
    return f"{path}?{urlencode(pairs)}"
