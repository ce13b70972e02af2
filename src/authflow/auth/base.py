"""Result type and abstract base class for authentication providers.

This module defines the two foundational types of the auth subsystem:

- :class:`AuthResult` -- the immutable outcome of one authentication action.
- :class:`AuthProvider` -- the abstract base class every provider extends.
  It owns the frozen, merged configuration and exposes it by dotted path
  through :meth:`~AuthProvider.get_config_value`.

To implement a new provider, subclass :class:`AuthProvider`, set the
:attr:`~AuthProvider.name` property, and implement the six action
coroutines.

See Also:
    :mod:`authflow.auth.manager` for provider registration and dispatch.
    :class:`~authflow.providers.email_pass.EmailPassAuthProvider` for the
    configuration-driven implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from authflow.config import ConfigResolver, build_provider_config
from authflow.exceptions import ForcedFailure
from authflow.models import Action, FailureKind, ProviderConfig


@dataclass(frozen=True)
class AuthResult:
    """Immutable outcome of one authentication action.

    Built exactly once per action invocation by the provider and never
    modified afterwards. Callers act on it: navigate to ``redirect``, show
    ``messages`` or ``errors``, persist ``token``.

    Attributes:
        success: Whether the action succeeded.
        response: The raw :class:`~authflow.client.TransportResponse` on
            success, or the failure object (an
            :class:`~authflow.exceptions.HTTPErrorResponse` or
            :class:`~authflow.exceptions.TransportError`) on failure.
        redirect: Configured redirect target, or ``None``.
        errors: Error strings; empty on success.
        messages: Message strings; empty on failure.
        token: Extracted token for login/register/refreshToken, else ``None``.
        failure_kind: Which failure branch was taken; ``None`` on success.

    Example::

        result = AuthResult(success=True, redirect="/", messages=("Welcome.",), token="abc")
        assert result.token == "abc"
    """

    success: bool
    response: Any = None
    redirect: Optional[str] = None
    errors: tuple[str, ...] = ()
    messages: tuple[str, ...] = ()
    token: Any = None
    failure_kind: Optional[FailureKind] = None


class AuthProvider(ABC):
    """Abstract base class for authentication providers.

    Holds the provider configuration, merged once at construction over the
    built-in defaults and read-only afterwards, so concurrent actions share
    it without locking.

    Args:
        config: Partial override (mapping) or a complete
            :class:`~authflow.models.ProviderConfig`.

    Raises:
        ConfigError: If the override is invalid.
    """

    def __init__(self, config: ProviderConfig | Mapping[str, Any] | None = None) -> None:
        self._config = build_provider_config(config)
        self._resolver = ConfigResolver(self._config, self.config_fallbacks())

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name the provider is registered under (e.g. ``"email"``)."""
        ...

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def config_fallbacks(self) -> dict[str, Any]:
        """Values used for configuration paths that resolve to ``None``.

        Subclasses return their default getters here.
        """
        return {}

    def get_config_value(self, path: str) -> Any:
        """Resolve a dotted configuration path, e.g. ``"login.redirect.success"``.

        Returns:
            The configured value, the subclass fallback for that path, or
            ``None`` when neither exists.
        """
        return self._resolver.get(path)

    def create_fail_response(self, data: Any = None) -> ForcedFailure:
        """Build the synthetic failure used by ``alwaysFail`` actions."""
        return ForcedFailure(data)

    async def run(self, action: Action, data: Any = None) -> AuthResult:
        """Dispatch *action* to the matching coroutine."""
        if action is Action.LOGOUT:
            return await self.logout()
        handler = {
            Action.LOGIN: self.authenticate,
            Action.REGISTER: self.register,
            Action.REQUEST_PASS: self.request_password,
            Action.RESET_PASS: self.reset_password,
            Action.REFRESH_TOKEN: self.refresh_token,
        }[action]
        return await handler(data)

    @abstractmethod
    async def authenticate(self, data: Any = None) -> AuthResult:
        """Log in with the submitted credentials."""
        ...

    @abstractmethod
    async def register(self, data: Any = None) -> AuthResult:
        """Create an account."""
        ...

    @abstractmethod
    async def logout(self) -> AuthResult:
        """End the session."""
        ...

    @abstractmethod
    async def request_password(self, data: Any = None) -> AuthResult:
        """Ask for password reset instructions."""
        ...

    @abstractmethod
    async def reset_password(self, data: Any = None) -> AuthResult:
        """Set a new password using a reset token."""
        ...

    @abstractmethod
    async def refresh_token(self, data: Any = None) -> AuthResult:
        """Exchange the submitted data for a fresh token."""
        ...
