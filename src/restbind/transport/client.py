import os

import httpx

from restbind.transport.httpx_adapter import HttpxTransport


def get_client(base_url: str | None = None) -> httpx.AsyncClient:
    url = base_url or os.getenv("RESTBIND_BASE_URL", "http://127.0.0.1:8000")
    timeout = float(os.getenv("RESTBIND_TIMEOUT", "30"))
    headers = {"Accept": "application/json"}
    token = os.getenv("RESTBIND_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(base_url=url, headers=headers, timeout=timeout)


def get_transport(base_url: str | None = None) -> HttpxTransport:
    return HttpxTransport(get_client(base_url))
