"""Config commands -- inspect the effective configuration.

Provides the ``authflow config`` sub-command group. ``show`` prints the
resolved CLI settings together with the merged provider configuration
(defaults plus every override layer); ``path`` prints where configuration
files are looked up.
"""

from __future__ import annotations

from typing import Any

import typer

from authflow.output import error, format_response, info

config_app = typer.Typer(no_args_is_help=True)

_GETTER_FIELDS = {"token": {"getter"}, "errors": {"getter"}, "messages": {"getter"}}


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Example::

        authflow config show
        authflow --json config show
    """
    from authflow.config import build_provider_config
    from authflow.exceptions import AuthflowError
    from authflow.models import GlobalConfig

    config: GlobalConfig = ctx.obj["config"]
    try:
        provider = build_provider_config(config.provider)
    except AuthflowError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    data: dict[str, Any] = config.model_dump(mode="json", exclude={"provider"})
    data["provider"] = provider.model_dump(mode="json", by_alias=True, exclude=_GETTER_FIELDS)
    format_response(data)


@config_app.command("path")
def config_path() -> None:
    """Show where configuration files are read from."""
    from authflow.config import find_project_config, global_config_path

    project = find_project_config()
    info(f"Global config: {global_config_path()}")
    info(f"Project config: {project if project else '(none)'}")
