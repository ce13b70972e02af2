"""Exception hierarchy for authflow.

All exceptions inherit from :class:`AuthflowError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`authflow.exit_codes`.
The top-level error handler in :func:`authflow.app.main` catches
``AuthflowError`` and exits with the appropriate code.

Transport outcomes are modelled as exceptions too, but they never escape an
:class:`~authflow.auth.base.AuthProvider` action: the provider turns each of
them into a failed :class:`~authflow.auth.base.AuthResult`.

Subclass hierarchy::

    AuthflowError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- AuthError               (exit 3)
    +-- HTTPErrorResponse       (exit 3)
    |   +-- ForcedFailure       (exit 3)
    |   +-- TokenMissingError   (exit 3)
    +-- TransportError          (exit 6)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from authflow.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class AuthflowError(Exception):
    """Base exception for all authflow errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`authflow.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(AuthflowError):
    """Raised for invalid CLI arguments or malformed ``--field`` values."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(AuthflowError):
    """Raised when no provider is registered under a requested name."""

    exit_code = EXIT_AUTH_FAILURE


class HTTPErrorResponse(AuthflowError):
    """A structured failure: the server answered with an error status and a body.

    The ``error`` attribute holds the decoded response body (JSON object,
    text, or ``None``) and is what the configured errors getter reads from.

    Args:
        status_code: HTTP status of the failed response.
        error: Decoded error body.
        url: Request URL, when known.
        method: Request method, when known.
        headers: Response headers, when known.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(
        self,
        status_code: int,
        error: Any = None,
        url: str = "",
        method: str = "",
        headers: Optional[dict[str, str]] = None,
        message: Optional[str] = None,
    ):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code
        self.error = error
        self.url = url
        self.method = method
        self.headers = headers or {}


class ForcedFailure(HTTPErrorResponse):
    """Synthetic failure produced when an action is configured with ``alwaysFail``.

    ``data`` keeps the payload the caller submitted so that demos and tests
    can inspect what would have been sent.
    """

    def __init__(self, data: Any = None, status_code: int = 401):
        super().__init__(status_code, error={}, message="Action is configured to always fail")
        self.data = data


class TokenMissingError(HTTPErrorResponse):
    """A successful response that carries no extractable token.

    The response body is exposed as ``error`` so the errors getter can still
    look for server-provided messages before falling back to the action's
    default errors.
    """

    def __init__(self, status_code: int, error: Any = None, key: str = ""):
        super().__init__(
            status_code,
            error=error,
            message="Could not extract token from the response.",
        )
        self.key = key


class TransportError(AuthflowError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Carries no response body; the provider reports it with a fixed message.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(AuthflowError):
    """Raised for configuration problems (invalid overrides, bad config files, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
