"""httpx wrapper.

Standardizes timeouts and headers for every request to the JSON-RPC
provider. Tests pass a `transport` (e.g. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from blockfix.core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured timeout and headers."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.rpc_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
