"""Canonical Pydantic models and enums shared across all authflow modules.

The models fall into two groups:

**Provider configuration** -- the declarative description of the six
authentication actions, consumed by
:class:`~authflow.providers.email_pass.EmailPassAuthProvider`:
    :class:`RedirectConfig`, :class:`ActionConfig`, :class:`ResetPassConfig`,
    :class:`TokenConfig`, :class:`ErrorsConfig`, :class:`MessagesConfig`, and
    :class:`ProviderConfig`.

    These are frozen and use camelCase aliases (``baseEndpoint``,
    ``alwaysFail``, ``defaultErrors``, ...). Snake_case field names are
    accepted as well. The field defaults *are* the built-in defaults that
    caller overrides are deep-merged over (see
    :func:`~authflow.config.build_provider_config`).

**CLI configuration** -- serialised as JSON/YAML on disk:
    :class:`RequestConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def camelize(name: str) -> str:
    """Convert ``snake_case`` to ``camelCase``; names without underscores pass through."""
    if "_" not in name:
        return name
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


# --- Enums ---


class Action(str, enum.Enum):
    """The authentication operations a provider can perform."""

    LOGIN = "login"
    REGISTER = "register"
    LOGOUT = "logout"
    REQUEST_PASS = "requestPass"
    RESET_PASS = "resetPass"
    REFRESH_TOKEN = "refreshToken"

    @property
    def requires_token(self) -> bool:
        """Whether a successful response must carry an access token."""
        return self in _TOKEN_ACTIONS

    @property
    def field_name(self) -> str:
        """Attribute name of this action's section on :class:`ProviderConfig`."""
        return _FIELD_NAMES[self]


_TOKEN_ACTIONS = frozenset({Action.LOGIN, Action.REGISTER, Action.REFRESH_TOKEN})

_FIELD_NAMES = {
    Action.LOGIN: "login",
    Action.REGISTER: "register",
    Action.LOGOUT: "logout",
    Action.REQUEST_PASS: "request_pass",
    Action.RESET_PASS: "reset_pass",
    Action.REFRESH_TOKEN: "refresh_token",
}


class HTTPMethod(str, enum.Enum):
    """HTTP verbs an action may be configured with."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


class FailureKind(str, enum.Enum):
    """Which branch of the pipeline produced a failed result."""

    ALWAYS_FAIL = "always_fail"
    ERROR_RESPONSE = "error_response"
    TOKEN_MISSING = "token_missing"
    TRANSPORT = "transport"


# --- Provider configuration ---

TokenGetter = Callable[[Action, Any], Any]
"""``(action, response) -> token or None``."""

ErrorsGetter = Callable[[Action, Any], Any]
"""``(action, error_response) -> sequence of error strings``."""

MessagesGetter = Callable[[Action, Any], Any]
"""``(action, response) -> sequence of message strings``."""

_DEFAULT_ERROR = "Something went wrong, please try again."


class _FrozenConfig(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=camelize,
        extra="forbid",
    )


class RedirectConfig(_FrozenConfig):
    """Destinations handed back to the caller after an action.

    ``None`` means "no redirect". The values are opaque to the provider.
    """

    success: Optional[str] = "/"
    failure: Optional[str] = None


class ActionConfig(_FrozenConfig):
    """Configuration of one authentication action.

    Example::

        ActionConfig(endpoint="login", method="post", alwaysFail=False)
    """

    endpoint: Optional[str] = ""
    method: HTTPMethod = HTTPMethod.POST
    always_fail: bool = Field(
        default=False,
        description="Force the failure branch regardless of the transport outcome",
    )
    redirect: RedirectConfig = Field(default_factory=RedirectConfig)
    default_errors: tuple[str, ...] = (_DEFAULT_ERROR,)
    default_messages: tuple[str, ...] = ()

    @field_validator("method", mode="before")
    @classmethod
    def lowercase_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        return value


class ResetPassConfig(ActionConfig):
    """Password reset action; also names the query parameter carrying the reset token."""

    reset_password_token_key: str = "reset_password_token"


class TokenConfig(_FrozenConfig):
    key: str = "data.token"
    getter: Optional[TokenGetter] = None


class ErrorsConfig(_FrozenConfig):
    key: str = "data.errors"
    getter: Optional[ErrorsGetter] = None


class MessagesConfig(_FrozenConfig):
    key: str = "data.messages"
    getter: Optional[MessagesGetter] = None


class ProviderConfig(_FrozenConfig):
    """Root configuration of the email/password provider.

    Every action endpoint is appended to ``base_endpoint``. The ``token``,
    ``errors`` and ``messages`` sections each name the dotted key their
    default getter reads, and optionally replace that getter with a callable
    ``(action, response) -> value``.

    See Also:
        :func:`~authflow.config.build_provider_config`: Deep-merge a partial
        override over these defaults.
    """

    base_endpoint: str = "/api/auth/"
    login: ActionConfig = Field(
        default_factory=lambda: ActionConfig(
            endpoint="login",
            default_errors=("Login/Email combination is not correct, please try again.",),
            default_messages=("You have been successfully logged in.",),
        )
    )
    register: ActionConfig = Field(
        default_factory=lambda: ActionConfig(
            endpoint="register",
            default_messages=("You have been successfully registered.",),
        )
    )
    logout: ActionConfig = Field(
        default_factory=lambda: ActionConfig(
            endpoint="logout",
            method=HTTPMethod.DELETE,
            default_messages=("You have been successfully logged out.",),
        )
    )
    request_pass: ActionConfig = Field(
        default_factory=lambda: ActionConfig(
            endpoint="request-pass",
            default_messages=("Reset password instructions have been sent to your email.",),
        )
    )
    reset_pass: ResetPassConfig = Field(
        default_factory=lambda: ResetPassConfig(
            endpoint="reset-pass",
            method=HTTPMethod.PUT,
            default_messages=("Your password has been successfully changed.",),
        )
    )
    refresh_token: ActionConfig = Field(
        default_factory=lambda: ActionConfig(
            endpoint="refresh-token",
            redirect=RedirectConfig(success=None, failure=None),
            default_messages=("Your token has been successfully refreshed.",),
        )
    )
    token: TokenConfig = Field(default_factory=TokenConfig)
    errors: ErrorsConfig = Field(default_factory=ErrorsConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)

    def action(self, action: Action) -> ActionConfig:
        """Return the configuration section for *action*."""
        return getattr(self, action.field_name)


# --- CLI configuration ---


class RequestConfig(BaseModel):
    """HTTP settings for the transport the CLI builds."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """CLI configuration persisted at ``~/.config/authflow/config.json``.

    Loaded by :func:`~authflow.config.load_global_config`. Fields here have
    the lowest precedence and can be overridden by project config,
    environment variables, or CLI flags. See
    :func:`~authflow.config.resolve_config` for the full precedence chain.

    The ``provider`` section is a *partial* :class:`ProviderConfig` override
    (camelCase or snake_case keys); it is deep-merged, never validated on
    its own.
    """

    base_url: Optional[str] = Field(
        default=None, description="Origin of the auth API, e.g. https://example.com"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    provider: dict[str, Any] = Field(default_factory=dict)
