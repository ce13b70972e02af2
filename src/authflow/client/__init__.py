"""HTTP transport module for authflow.

Provides the transport contract auth providers depend on and an
implementation backed by :mod:`httpx`.

Classes:
    :class:`TransportResponse` -- response envelope (status, headers, body).
    :class:`Transport` -- protocol with a single ``send`` coroutine.
    :class:`AsyncClient` -- non-blocking transport backed by :class:`httpx.AsyncClient`.

Example::

    from authflow.client import AsyncClient

    async with AsyncClient("https://example.com") as client:
        resp = await client.send("post", "/api/auth/login", {"email": "me@example.com"})
"""

from authflow.client.async_client import AsyncClient
from authflow.client.transport import Transport, TransportResponse

__all__ = ["AsyncClient", "Transport", "TransportResponse"]
