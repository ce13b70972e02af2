"""authflow -- configuration-driven email/password authentication provider.

This package turns a declarative description of authentication HTTP actions
(login, registration, logout, password request/reset, token refresh) into a
single request per action and a normalised, immutable
:class:`~authflow.auth.base.AuthResult` describing the outcome.

Typical usage::

    from authflow import AsyncClient, EmailPassAuthProvider

    async with AsyncClient(base_url="https://example.com") as client:
        provider = EmailPassAuthProvider(client, config={"login": {"endpoint": "sign-in"}})
        result = await provider.authenticate({"email": "a@b.c", "password": "secret"})
        if result.success:
            print(result.token)

Modules:
    models: Pydantic configuration models and enums.
    config: Config resolver, deep merge, and CLI configuration layering.
    extractors: Path extraction and the default token/errors/messages getters.
    client: Transport envelope, protocol, and the httpx-backed client.
    sources: Query-parameter sources used by the password-reset action.
    auth: Result type, abstract provider, and the provider registry.
    providers: Concrete providers (email/password).
    app: Typer application and CLI entry point.
"""

from authflow.auth.base import AuthProvider, AuthResult
from authflow.auth.manager import AuthManager, create_default_manager
from authflow.client import AsyncClient, Transport, TransportResponse
from authflow.models import Action, FailureKind, ProviderConfig
from authflow.providers import EmailPassAuthProvider

__version__ = "0.1.0"

__all__ = [
    "Action",
    "AsyncClient",
    "AuthManager",
    "AuthProvider",
    "AuthResult",
    "EmailPassAuthProvider",
    "FailureKind",
    "ProviderConfig",
    "Transport",
    "TransportResponse",
    "create_default_manager",
]
