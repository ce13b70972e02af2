"""Transport capability consumed by auth providers.

A provider never talks to :mod:`httpx` directly. It calls
:meth:`Transport.send` and gets back either a :class:`TransportResponse`
envelope (status, headers, decoded body) or one of two failures:

* :class:`~authflow.exceptions.HTTPErrorResponse` -- the server answered
  with an error status; the decoded body is available as ``error``.
* :class:`~authflow.exceptions.TransportError` -- no usable response at all
  (connection refused, timeout, DNS failure).

Any object with a matching ``send`` coroutine satisfies the protocol, which
is how tests substitute an in-memory transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """Full response envelope of a successful request.

    Attributes:
        status_code: HTTP status code.
        body: Decoded body -- a JSON value, raw text, or ``None`` when empty.
        headers: Response headers.
        url: Request URL.
        method: Request method (upper case).
    """

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    method: str = ""

    @classmethod
    def empty(cls) -> TransportResponse:
        """Placeholder used when an action is configured to skip the network call."""
        return cls(status_code=200, body={})


@runtime_checkable
class Transport(Protocol):
    """Send one request and return its single terminal outcome."""

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
    ) -> TransportResponse:
        """Send *body* as JSON to *url* with *method*.

        Raises:
            HTTPErrorResponse: On an HTTP error status (>= 400).
            TransportError: On network-level failures.
        """
        ...
