"""Email/password authentication provider.

:class:`EmailPassAuthProvider` is the configuration-driven provider: every
action (login, register, logout, requestPass, resetPass, refreshToken) runs
through the same pipeline in :meth:`~EmailPassAuthProvider.run_action`:

1. Resolve ``method`` and ``url = baseEndpoint + endpoint``.
2. Send one request through the :class:`~authflow.client.Transport`.
3. Force the failure branch when the action has ``alwaysFail`` set.
4. For token actions (login, register, refreshToken), extract the token and
   fail when it is missing.
5. Build an :class:`~authflow.auth.base.AuthResult`: success carries the
   redirect, messages, and token; failure carries the redirect and errors.

The per-action differences are small: resetPass injects the reset token
from a :class:`~authflow.sources.QueryParamSource` into the body, and
logout skips the network call entirely when its endpoint is empty.

Default settings (all overridable, camelCase or snake_case keys)::

    {
      "baseEndpoint": "/api/auth/",
      "login": {
        "endpoint": "login", "method": "post", "alwaysFail": false,
        "redirect": {"success": "/", "failure": null},
        "defaultErrors": ["Login/Email combination is not correct, please try again."],
        "defaultMessages": ["You have been successfully logged in."]
      },
      "register":     {"endpoint": "register", "method": "post", ...},
      "logout":       {"endpoint": "logout", "method": "delete", ...},
      "requestPass":  {"endpoint": "request-pass", "method": "post", ...},
      "resetPass":    {"endpoint": "reset-pass", "method": "put",
                       "resetPasswordTokenKey": "reset_password_token", ...},
      "refreshToken": {"endpoint": "refresh-token", "method": "post",
                       "redirect": {"success": null, "failure": null}, ...},
      "token":    {"key": "data.token"},
      "errors":   {"key": "data.errors"},
      "messages": {"key": "data.messages"}
    }

Each of ``token``, ``errors`` and ``messages`` also accepts a ``getter``
callable ``(action, response) -> value`` replacing the default path lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from authflow.auth.base import AuthProvider, AuthResult
from authflow.client.transport import Transport, TransportResponse
from authflow.exceptions import (
    ForcedFailure,
    HTTPErrorResponse,
    TokenMissingError,
    TransportError,
)
from authflow.extractors import (
    as_string_list,
    default_errors_getter,
    default_messages_getter,
    default_token_getter,
)
from authflow.models import Action, FailureKind, ProviderConfig
from authflow.sources import EMPTY_QUERY_PARAMS, QueryParamSource

logger = logging.getLogger(__name__)

TRANSPORT_FAILURE_MESSAGE = "Something went wrong."


class EmailPassAuthProvider(AuthProvider):
    """The most common authentication provider, for the email/password strategy.

    Args:
        transport: Sends the requests (usually an
            :class:`~authflow.client.AsyncClient`).
        query_params: Supplies the reset token for :meth:`reset_password`.
        config: Partial override of the default settings.

    Example::

        provider = EmailPassAuthProvider(client, config={"baseEndpoint": "/auth/"})
        result = await provider.authenticate({"email": "me@example.com", "password": "pw"})
    """

    def __init__(
        self,
        transport: Transport,
        query_params: Optional[QueryParamSource] = None,
        config: ProviderConfig | Mapping[str, Any] | None = None,
    ) -> None:
        self._transport = transport
        self._query_params = query_params or EMPTY_QUERY_PARAMS
        super().__init__(config)

    @property
    def name(self) -> str:
        return "email"

    def config_fallbacks(self) -> dict[str, Any]:
        return {
            "token.getter": default_token_getter(
                lambda: self.get_config_value("token.key"),
            ),
            "errors.getter": default_errors_getter(
                lambda: self.get_config_value("errors.key"),
                lambda action: self.get_config_value(f"{action.value}.defaultErrors") or (),
            ),
            "messages.getter": default_messages_getter(
                lambda: self.get_config_value("messages.key"),
                lambda action: self.get_config_value(f"{action.value}.defaultMessages") or (),
            ),
        }

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    async def authenticate(self, data: Any = None) -> AuthResult:
        return await self.run_action(Action.LOGIN, data)

    async def register(self, data: Any = None) -> AuthResult:
        return await self.run_action(Action.REGISTER, data)

    async def request_password(self, data: Any = None) -> AuthResult:
        return await self.run_action(Action.REQUEST_PASS, data)

    async def reset_password(self, data: Any = None) -> AuthResult:
        """Submit a new password along with the reset token from the query string.

        The submitted mapping is copied, never modified; the token is stored
        under ``resetPass.resetPasswordTokenKey``.
        """
        token_key = self.get_config_value("resetPass.resetPasswordTokenKey")
        body = dict(data or {})
        body[token_key] = self._query_params.lookup(token_key)
        return await self.run_action(Action.RESET_PASS, body)

    async def logout(self) -> AuthResult:
        """Log out; with an empty ``logout.endpoint`` no request is sent."""
        send = bool(self.get_config_value("logout.endpoint"))
        return await self.run_action(Action.LOGOUT, send=send)

    async def refresh_token(self, data: Any = None) -> AuthResult:
        return await self.run_action(Action.REFRESH_TOKEN, data)

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    def get_action_endpoint(self, action: Action) -> str:
        base_endpoint = self.get_config_value("baseEndpoint") or ""
        action_endpoint = self.get_config_value(f"{action.value}.endpoint") or ""
        return base_endpoint + action_endpoint

    async def run_action(
        self,
        action: Action,
        data: Any = None,
        *,
        send: bool = True,
    ) -> AuthResult:
        """Run one action end to end and return its result.

        Structured and opaque transport failures, ``alwaysFail`` and a
        missing token all end in a failed :class:`AuthResult`; none of them
        raise. Any other exception raised by the transport counts as an
        opaque failure. Exceptions from configured getters propagate.

        Args:
            action: The action to run.
            data: Request body.
            send: ``False`` skips the network call and continues with an
                empty placeholder response.
        """
        method = self.get_config_value(f"{action.value}.method")
        url = self.get_action_endpoint(action)

        try:
            if send:
                logger.debug("%s: %s %s", action.value, method.value.upper(), url)
                response = await self._send(method.value, url, data)
            else:
                logger.debug("%s: no endpoint configured, skipping request", action.value)
                response = TransportResponse.empty()

            if self.get_config_value(f"{action.value}.alwaysFail"):
                raise self.create_fail_response(data)

            token = self._validate_token(action, response) if action.requires_token else None
        except HTTPErrorResponse as exc:
            errors = self.get_config_value("errors.getter")(action, exc)
            return self._failure(action, exc, as_string_list(errors), _failure_kind(exc))
        except TransportError as exc:
            return self._failure(action, exc, [TRANSPORT_FAILURE_MESSAGE], FailureKind.TRANSPORT)

        messages = self.get_config_value("messages.getter")(action, response)
        return AuthResult(
            success=True,
            response=response,
            redirect=self.get_config_value(f"{action.value}.redirect.success"),
            errors=(),
            messages=tuple(as_string_list(messages)),
            token=token,
        )

    async def _send(self, method: str, url: str, data: Any) -> TransportResponse:
        """Send through the transport; unexpected exceptions become opaque failures."""
        try:
            return await self._transport.send(method, url, data)
        except (HTTPErrorResponse, TransportError):
            raise
        except Exception as exc:
            raise TransportError(f"Request to {url} failed: {exc!r}") from exc

    def _validate_token(self, action: Action, response: TransportResponse) -> Any:
        getter = self.get_config_value("token.getter")
        token = getter(action, response)
        if not token:
            key = self.get_config_value("token.key")
            logger.warning(
                "%s: token is not provided under '%s' key with getter '%s', "
                "check your auth configuration.",
                type(self).__name__,
                key,
                getattr(getter, "__qualname__", repr(getter)),
            )
            raise TokenMissingError(response.status_code, error=response.body, key=key)
        return token

    def _failure(
        self,
        action: Action,
        failure: Exception,
        errors: list[str],
        kind: FailureKind,
    ) -> AuthResult:
        logger.debug("%s failed (%s): %s", action.value, kind.value, failure)
        return AuthResult(
            success=False,
            response=failure,
            redirect=self.get_config_value(f"{action.value}.redirect.failure"),
            errors=tuple(errors),
            messages=(),
            token=None,
            failure_kind=kind,
        )


def _failure_kind(exc: HTTPErrorResponse) -> FailureKind:
    if isinstance(exc, ForcedFailure):
        return FailureKind.ALWAYS_FAIL
    if isinstance(exc, TokenMissingError):
        return FailureKind.TOKEN_MISSING
    return FailureKind.ERROR_RESPONSE
