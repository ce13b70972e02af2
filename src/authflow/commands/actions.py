"""Action commands -- run one authentication action against the configured API.

Each command builds a request body from its options, sends it through the
email/password provider, and prints the resulting
:class:`~authflow.auth.base.AuthResult`. A failed result exits with
:data:`~authflow.exit_codes.EXIT_AUTH_FAILURE`.

Typical workflow::

    authflow --base-url https://example.com login --email me@example.com --password-source env:PW
    authflow reset-pass --link "https://example.com/reset?reset_password_token=XYZ" --password-source prompt
    authflow logout
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from authflow.auth.base import AuthResult
from authflow.auth.manager import create_default_manager
from authflow.client import AsyncClient
from authflow.client.response import format_auth_result
from authflow.config import build_provider_config, resolve_credential
from authflow.exceptions import AuthflowError, InvalidUsageError
from authflow.exit_codes import EXIT_AUTH_FAILURE
from authflow.models import Action, FailureKind, GlobalConfig
from authflow.output import error, suggest
from authflow.sources import MappingQueryParams, QueryParamSource, UrlQueryParams


def _make_client(config: GlobalConfig) -> AsyncClient:
    """Build the HTTP transport for *config*."""
    if not config.base_url:
        raise InvalidUsageError(
            "No base URL configured. Pass --base-url, set AUTHFLOW_BASE_URL, "
            "or add base_url to authflow.json."
        )
    return AsyncClient(
        base_url=config.base_url,
        timeout=config.request.timeout,
        verify_ssl=config.request.verify_ssl,
    )


def parse_fields(fields: Optional[list[str]]) -> dict[str, Any]:
    """Parse repeated ``key=value`` options into a request body.

    Values that parse as JSON (numbers, booleans, objects) are decoded;
    anything else is kept as a string.

    Raises:
        InvalidUsageError: If an item has no ``=`` or an empty key.
    """
    body: dict[str, Any] = {}
    for item in fields or []:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid --field '{item}', expected key=value")
        try:
            body[key] = json.loads(raw)
        except json.JSONDecodeError:
            body[key] = raw
    return body


async def _run_action(
    config: GlobalConfig,
    action: Action,
    data: Any,
    query_params: Optional[QueryParamSource],
) -> AuthResult:
    async with _make_client(config) as client:
        manager = create_default_manager(client, query_params, config.provider)
        return await manager.run("email", action, data)


def _execute(
    ctx: typer.Context,
    action: Action,
    data: Any = None,
    query_params: Optional[QueryParamSource] = None,
) -> None:
    """Run *action*, print its result, and exit non-zero when it failed."""
    config: GlobalConfig = ctx.obj["config"]
    try:
        result = asyncio.run(_run_action(config, action, data, query_params))
    except AuthflowError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_auth_result(result)
    if not result.success:
        if result.failure_kind is FailureKind.TRANSPORT:
            suggest(f"Check that {config.base_url} is reachable, or pass --base-url.")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)


def _credentials_body(
    email: Optional[str],
    password_source: Optional[str],
    fields: Optional[list[str]],
) -> dict[str, Any]:
    body = parse_fields(fields)
    if email is not None:
        body["email"] = email
    if password_source is not None:
        body["password"] = resolve_credential(password_source)
    return body


def _fail_on_usage(exc: AuthflowError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

_FIELD_HELP = "Extra body field as key=value (repeatable)."


def login_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account email."),
    password_source: str = typer.Option(
        "prompt", "--password-source", help="Password source: env:VAR, file:/path, or prompt."
    ),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help=_FIELD_HELP),
) -> None:
    """Log in and print the extracted token."""
    try:
        body = _credentials_body(email, password_source, field)
    except AuthflowError as exc:
        raise _fail_on_usage(exc) from None
    _execute(ctx, Action.LOGIN, body)


def register_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account email."),
    password_source: str = typer.Option(
        "prompt", "--password-source", help="Password source: env:VAR, file:/path, or prompt."
    ),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help=_FIELD_HELP),
) -> None:
    """Create an account."""
    try:
        body = _credentials_body(email, password_source, field)
    except AuthflowError as exc:
        raise _fail_on_usage(exc) from None
    _execute(ctx, Action.REGISTER, body)


def logout_command(ctx: typer.Context) -> None:
    """Log out (no request is sent when the logout endpoint is empty)."""
    _execute(ctx, Action.LOGOUT)


def request_pass_command(
    ctx: typer.Context,
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account email."),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help=_FIELD_HELP),
) -> None:
    """Request password reset instructions."""
    try:
        body = _credentials_body(email, None, field)
    except AuthflowError as exc:
        raise _fail_on_usage(exc) from None
    _execute(ctx, Action.REQUEST_PASS, body)


def reset_pass_command(
    ctx: typer.Context,
    link: Optional[str] = typer.Option(
        None, "--link", help="Reset link from the email; its query string carries the token."
    ),
    token: Optional[str] = typer.Option(None, "--token", help="Reset token value."),
    password_source: str = typer.Option(
        "prompt", "--password-source", help="New password source: env:VAR, file:/path, or prompt."
    ),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help=_FIELD_HELP),
) -> None:
    """Set a new password using the token from a reset link."""
    config: GlobalConfig = ctx.obj["config"]
    try:
        if link is not None and token is not None:
            raise InvalidUsageError("Pass either --link or --token, not both.")
        query_params: Optional[QueryParamSource] = None
        if link is not None:
            query_params = UrlQueryParams(link)
        elif token is not None:
            key = build_provider_config(config.provider).reset_pass.reset_password_token_key
            query_params = MappingQueryParams({key: token})
        body = _credentials_body(None, password_source, field)
    except AuthflowError as exc:
        raise _fail_on_usage(exc) from None
    _execute(ctx, Action.RESET_PASS, body, query_params)


def refresh_token_command(
    ctx: typer.Context,
    token_source: Optional[str] = typer.Option(
        None, "--token-source", help="Current token source (env:VAR, file:/path, prompt); sent as 'token'."
    ),
    field: Optional[list[str]] = typer.Option(None, "--field", "-F", help=_FIELD_HELP),
) -> None:
    """Exchange the current token for a fresh one."""
    try:
        body = parse_fields(field)
        if token_source is not None:
            body["token"] = resolve_credential(token_source)
    except AuthflowError as exc:
        raise _fail_on_usage(exc) from None
    _execute(ctx, Action.REFRESH_TOKEN, body)


def register_action_commands(app: typer.Typer) -> None:
    """Attach the six action commands to *app*."""
    app.command("login")(login_command)
    app.command("register")(register_command)
    app.command("logout")(logout_command)
    app.command("request-pass")(request_pass_command)
    app.command("reset-pass")(reset_pass_command)
    app.command("refresh-token")(refresh_token_command)
