"""Asynchronous HTTP transport backed by :class:`httpx.AsyncClient`.

:class:`AsyncClient` implements the :class:`~authflow.client.transport.Transport`
protocol. It performs exactly one request per :meth:`~AsyncClient.send`
call -- there is no retry or backoff -- and maps the outcome onto the
transport contract:

* status < 400 -- a :class:`~authflow.client.transport.TransportResponse`.
* status >= 400 -- :class:`~authflow.exceptions.HTTPErrorResponse` carrying
  the decoded error body.
* :class:`httpx.HTTPError` (connect, timeout, protocol errors) --
  :class:`~authflow.exceptions.TransportError`.

Cancellation is left to :mod:`asyncio`: cancelling the awaiting task
cancels the in-flight httpx request.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from authflow.client.response import extract_response_data
from authflow.client.transport import TransportResponse
from authflow.exceptions import HTTPErrorResponse, TransportError

logger = logging.getLogger(__name__)


class AsyncClient:
    """Asynchronous HTTP transport for auth API calls.

    Must be used as an async context manager so the underlying connection
    pool is opened and closed deterministically.

    Args:
        base_url: Origin prepended to relative request URLs
            (e.g. ``https://example.com``).
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        headers: Headers sent with every request.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).

    Example::

        async with AsyncClient("https://example.com") as client:
            response = await client.send("post", "/api/auth/login", {"email": "me@example.com"})
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        verify_ssl: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._headers = dict(headers or {})
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            verify=self._verify_ssl,
            headers={"Accept": "application/json", **self._headers},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Transport protocol
    # ------------------------------------------------------------------ #

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
    ) -> TransportResponse:
        """Send a single request and return its response envelope.

        Args:
            method: HTTP method, any case.
            url: Absolute URL, or a path relative to ``base_url``.
            body: JSON-serialisable request body; omitted when ``None``.

        Returns:
            The :class:`~authflow.client.transport.TransportResponse`.

        Raises:
            HTTPErrorResponse: On 4xx / 5xx.
            TransportError: On network / timeout errors.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        method = method.upper()
        kwargs: dict[str, Any] = {"method": method, "url": url}
        if body is not None:
            kwargs["json"] = body

        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(**kwargs)
        except httpx.HTTPError as exc:
            logger.debug("Transport failure for %s %s: %s", method, url, exc)
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        envelope = TransportResponse(
            status_code=response.status_code,
            body=extract_response_data(response),
            headers=dict(response.headers),
            url=str(response.request.url),
            method=method,
        )

        if response.status_code >= 400:
            raise HTTPErrorResponse(
                response.status_code,
                error=envelope.body,
                url=envelope.url,
                method=method,
                headers=envelope.headers,
            )
        return envelope
