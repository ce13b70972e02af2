"""Tests for AuthManager and create_default_manager."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from authflow.auth.base import AuthProvider, AuthResult
from authflow.auth.manager import AuthManager, create_default_manager
from authflow.client.transport import TransportResponse
from authflow.exceptions import AuthError
from authflow.models import Action
from authflow.providers import EmailPassAuthProvider
from authflow.sources import MappingQueryParams

from conftest import FakeTransport


class RecordingProvider(AuthProvider):
    """Provider that records which coroutine handled each action."""

    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self.handled: list[tuple[str, Any]] = []
        super().__init__()

    @property
    def name(self) -> str:
        return self._name

    def _record(self, handler: str, data: Any = None) -> AuthResult:
        self.handled.append((handler, data))
        return AuthResult(success=True, messages=(handler,))

    async def authenticate(self, data: Any = None) -> AuthResult:
        return self._record("authenticate", data)

    async def register(self, data: Any = None) -> AuthResult:
        return self._record("register", data)

    async def logout(self) -> AuthResult:
        return self._record("logout")

    async def request_password(self, data: Any = None) -> AuthResult:
        return self._record("request_password", data)

    async def reset_password(self, data: Any = None) -> AuthResult:
        return self._record("reset_password", data)

    async def refresh_token(self, data: Any = None) -> AuthResult:
        return self._record("refresh_token", data)


class TestAuthManager:
    def test_register_and_get(self) -> None:
        manager = AuthManager()
        provider = RecordingProvider()
        manager.register(provider)
        assert manager.get_provider("recording") is provider
        assert manager.list_names() == ["recording"]

    def test_register_replaces_same_name(self) -> None:
        manager = AuthManager()
        first, second = RecordingProvider(), RecordingProvider()
        manager.register(first)
        manager.register(second)
        assert manager.get_provider("recording") is second

    def test_unknown_provider(self) -> None:
        manager = AuthManager()
        manager.register(RecordingProvider("a"))
        manager.register(RecordingProvider("b"))
        with pytest.raises(AuthError, match="Available providers: a, b"):
            manager.get_provider("c")

    def test_unknown_provider_on_empty_manager(self) -> None:
        with pytest.raises(AuthError, match=r"\(none\)"):
            AuthManager().get_provider("email")

    @pytest.mark.parametrize(
        "action, handler",
        [
            (Action.LOGIN, "authenticate"),
            (Action.REGISTER, "register"),
            (Action.LOGOUT, "logout"),
            (Action.REQUEST_PASS, "request_password"),
            (Action.RESET_PASS, "reset_password"),
            (Action.REFRESH_TOKEN, "refresh_token"),
        ],
    )
    def test_run_dispatches(self, action: Action, handler: str) -> None:
        manager = AuthManager()
        provider = RecordingProvider()
        manager.register(provider)

        result = asyncio.run(manager.run("recording", action, {"k": "v"}))

        assert result.messages == (handler,)
        expected_data = None if action is Action.LOGOUT else {"k": "v"}
        assert provider.handled == [(handler, expected_data)]


class TestDefaultManager:
    def test_registers_email_provider(self) -> None:
        manager = create_default_manager(FakeTransport())
        assert manager.list_names() == ["email"]
        assert isinstance(manager.get_provider("email"), EmailPassAuthProvider)

    def test_passes_config_and_query_params(self) -> None:
        transport = FakeTransport(TransportResponse(200, body={}))
        manager = create_default_manager(
            transport,
            query_params=MappingQueryParams({"reset_password_token": "XYZ"}),
            config={"baseEndpoint": "/auth/"},
        )

        result = asyncio.run(manager.run("email", Action.RESET_PASS, {"password": "p"}))

        assert result.success is True
        assert transport.calls[0]["url"] == "/auth/reset-pass"
        assert transport.calls[0]["body"]["reset_password_token"] == "XYZ"
