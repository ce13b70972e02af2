"""Response helpers -- decode httpx bodies and render auth results.

:func:`extract_response_data` turns an :class:`httpx.Response` body into the
value the extractors walk. :func:`result_to_dict` and
:func:`format_auth_result` bridge a finished
:class:`~authflow.auth.base.AuthResult` to the output system.

See Also:
    :mod:`authflow.output` -- the output manager that renders data.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx

from authflow.client.transport import TransportResponse
from authflow.exceptions import AuthflowError, HTTPErrorResponse
from authflow.output import get_output

if TYPE_CHECKING:
    from authflow.auth.base import AuthResult


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first.  If that fails (e.g. the
    response is HTML or plain text), returns the raw text.  Returns
    ``None`` for responses with no content.

    Args:
        response: The :class:`httpx.Response` to extract data from.

    Returns:
        A JSON-decoded object (``dict``, ``list``, etc.), a ``str`` of raw
        text, or ``None`` if the body is empty.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _describe_response(response: Any) -> dict[str, Any]:
    """Summarise the raw response or failure object held by a result."""
    if isinstance(response, TransportResponse):
        return {"status": response.status_code, "body": response.body}
    if isinstance(response, HTTPErrorResponse):
        return {"status": response.status_code, "error": response.error}
    if isinstance(response, AuthflowError):
        return {"error": str(response)}
    return {"body": response}


def result_to_dict(result: AuthResult) -> dict[str, Any]:
    """Return a JSON-friendly view of *result*.

    The token is included verbatim; callers that print results decide
    whether to show it.
    """
    return {
        "success": result.success,
        "redirect": result.redirect,
        "errors": list(result.errors),
        "messages": list(result.messages),
        "token": result.token,
        "failure_kind": result.failure_kind.value if result.failure_kind else None,
        "response": _describe_response(result.response),
    }


def format_auth_result(result: AuthResult) -> None:
    """Print a result: status lines to stderr, the result data to stdout."""
    output = get_output()
    for message in result.messages:
        output.success(message)
    for err in result.errors:
        output.error(err)
    output.format_response(result_to_dict(result))
