"""Pull values out of nested response data by dotted key path.

:func:`get_deep` is the single primitive: it walks a container along a path
such as ``"data.token"`` and falls back to a default when any segment is
missing. It never raises on a missing or mistyped segment, which is what lets
"the response has no ``errors`` field" degrade to "use the action's default
errors".

The ``default_*_getter`` factories build the getters a provider uses when the
configuration does not supply its own. Each returned getter has the
signature ``(action, response) -> value``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Callable

from authflow.models import Action, ErrorsGetter, MessagesGetter, TokenGetter

_MISSING = object()

_SCALARS = (str, bytes, bytearray, int, float, complex)


def get_deep(container: Any, path: str, *fallbacks: Any) -> Any:
    """Return the value at *path* inside *container*, or the first fallback.

    Segments are separated by dots. Mappings are indexed by key, sequences
    (other than strings) by integer segment, and any other object by
    attribute. Strings and numbers are leaves. A value of ``None`` counts
    as absent.

    Args:
        container: The object to walk (usually a decoded JSON body).
        path: Dotted key path. An empty path returns *container* itself.
        *fallbacks: Value returned when the path does not resolve. Only the
            first one is used; with none given, ``None`` is returned.

    Returns:
        The value found at *path*, else the first fallback, else ``None``.

    Example::

        >>> get_deep({"data": {"token": "abc"}}, "data.token")
        'abc'
        >>> get_deep({}, "data.errors", ["Something went wrong."])
        ['Something went wrong.']
    """
    default = fallbacks[0] if fallbacks else None
    value = container
    if path:
        for segment in path.split("."):
            value = _step(value, segment)
            if value is _MISSING:
                return default
    if value is None:
        return default
    return value


def _step(value: Any, segment: str) -> Any:
    """Descend one segment, returning ``_MISSING`` when it cannot."""
    if value is None:
        return _MISSING
    if isinstance(value, Mapping):
        return value.get(segment, _MISSING)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return value[int(segment)]
        except (ValueError, IndexError):
            return _MISSING
    if isinstance(value, _SCALARS):
        return _MISSING
    return getattr(value, segment, _MISSING)


def as_string_list(value: Any) -> list[str]:
    """Normalise an extracted errors/messages value to a list of strings.

    Mappings (field-keyed validation errors such as
    ``{"email": ["is invalid"]}``) are flattened to their values.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Mapping):
        return [item for entry in value.values() for item in as_string_list(entry)]
    if isinstance(value, Sequence):
        return [str(item) for item in value]
    return [str(value)]


def default_token_getter(key: Callable[[], str]) -> TokenGetter:
    """Build the default token getter.

    Reads ``response.body`` at the configured token key. There is no
    fallback: a missing token yields ``None``.

    Args:
        key: Returns the current ``token.key`` value.
    """

    def token_getter(action: Action, response: Any) -> Any:
        return get_deep(getattr(response, "body", None), key())

    return token_getter


def default_errors_getter(
    key: Callable[[], str],
    defaults: Callable[[Action], Sequence[str]],
) -> ErrorsGetter:
    """Build the default errors getter.

    Reads ``error_response.error`` at the configured errors key, falling
    back to the action's ``defaultErrors``.

    Args:
        key: Returns the current ``errors.key`` value.
        defaults: Returns ``defaultErrors`` for an action.
    """

    def errors_getter(action: Action, error_response: Any) -> list[str]:
        value = get_deep(getattr(error_response, "error", None), key(), defaults(action))
        return as_string_list(value)

    return errors_getter


def default_messages_getter(
    key: Callable[[], str],
    defaults: Callable[[Action], Sequence[str]],
) -> MessagesGetter:
    """Build the default messages getter.

    Reads ``response.body`` at the configured messages key, falling back to
    the action's ``defaultMessages``.
    """

    def messages_getter(action: Action, response: Any) -> list[str]:
        value = get_deep(getattr(response, "body", None), key(), defaults(action))
        return as_string_list(value)

    return messages_getter
