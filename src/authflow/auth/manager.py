"""Auth manager -- registry and dispatcher for auth providers.

The :class:`AuthManager` maps provider names (``"email"``, ...) to
:class:`~authflow.auth.base.AuthProvider` instances and exposes a single
:meth:`~AuthManager.run` coroutine the CLI calls.

For most use cases, call :func:`create_default_manager` to get a manager
with the email/password provider registered.

See Also:
    :class:`~authflow.auth.base.AuthProvider` -- the provider interface.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from authflow.auth.base import AuthProvider, AuthResult
from authflow.client.transport import Transport
from authflow.exceptions import AuthError
from authflow.models import Action, ProviderConfig
from authflow.sources import QueryParamSource


class AuthManager:
    """Registry and dispatcher for authentication providers.

    Providers are registered by their :attr:`~AuthProvider.name`.

    Example::

        manager = AuthManager()
        manager.register(EmailPassAuthProvider(client))
        result = await manager.run("email", Action.LOGOUT)
    """

    def __init__(self) -> None:
        self._providers: dict[str, AuthProvider] = {}

    def register(self, provider: AuthProvider) -> None:
        """Register a provider, keyed by its name.

        A provider already registered under the same name is replaced.
        """
        self._providers[provider.name] = provider

    def get_provider(self, name: str) -> AuthProvider:
        """Retrieve a registered provider by name.

        Raises:
            AuthError: If no provider is registered under *name*.
        """
        provider = self._providers.get(name)
        if provider is None:
            available = ", ".join(sorted(self._providers)) or "(none)"
            raise AuthError(
                f"No auth provider registered under '{name}'. "
                f"Available providers: {available}"
            )
        return provider

    async def run(self, name: str, action: Action, data: Any = None) -> AuthResult:
        """Run *action* on the provider registered as *name*.

        Raises:
            AuthError: If no provider is registered under *name*.
        """
        return await self.get_provider(name).run(action, data)

    def list_names(self) -> list[str]:
        """Return the sorted names of all registered providers."""
        return sorted(self._providers.keys())


def create_default_manager(
    transport: Transport,
    query_params: Optional[QueryParamSource] = None,
    config: ProviderConfig | Mapping[str, Any] | None = None,
) -> AuthManager:
    """Create an :class:`AuthManager` with the built-in providers.

    Registers ``email`` -- :class:`~authflow.providers.EmailPassAuthProvider`
    configured with *config*.

    Args:
        transport: Transport shared by the providers.
        query_params: Query-parameter source for password resets.
        config: Partial provider configuration override.
    """
    from authflow.providers import EmailPassAuthProvider

    manager = AuthManager()
    manager.register(EmailPassAuthProvider(transport, query_params=query_params, config=config))
    return manager
