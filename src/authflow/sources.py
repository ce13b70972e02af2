"""Query-parameter sources consumed by the password-reset action.

A password-reset link usually carries a one-time token in its query string
(``https://example.com/reset?reset_password_token=XYZ``). The provider does
not know where that link came from; it asks a :class:`QueryParamSource` for
the value by name.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional, Protocol, runtime_checkable
from urllib.parse import parse_qs, urlparse


@runtime_checkable
class QueryParamSource(Protocol):
    """Anything that can look up a query parameter by name."""

    def lookup(self, name: str) -> Optional[str]:
        """Return the parameter value, or ``None`` when it is absent."""
        ...


class MappingQueryParams:
    """Query parameters backed by a plain mapping."""

    def __init__(self, params: Optional[Mapping[str, str]] = None) -> None:
        self._params = dict(params or {})

    def lookup(self, name: str) -> Optional[str]:
        return self._params.get(name)


class UrlQueryParams:
    """Query parameters parsed from a URL.

    When a parameter is repeated, the first value wins. Blank values are
    kept (``?token=`` yields ``""``).

    Example::

        params = UrlQueryParams("https://example.com/reset?reset_password_token=XYZ")
        assert params.lookup("reset_password_token") == "XYZ"
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._params = parse_qs(urlparse(url).query, keep_blank_values=True)

    def lookup(self, name: str) -> Optional[str]:
        values = self._params.get(name)
        if not values:
            return None
        return values[0]


EMPTY_QUERY_PARAMS = MappingQueryParams()
