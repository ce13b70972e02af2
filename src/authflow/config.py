"""Provider configuration resolution and CLI configuration management.

This module covers two layers:

* **Provider configuration** -- :func:`deep_merge` and
  :func:`build_provider_config` merge a caller-supplied partial override over
  the built-in :class:`~authflow.models.ProviderConfig` defaults, and
  :class:`ConfigResolver` reads the frozen result by dotted path
  (``"login.redirect.success"``).
* **CLI configuration** -- XDG-aware directories, the global
  ``config.json``, the project-local ``authflow.json`` / ``authflow.yaml``,
  environment variables, and :func:`resolve_config` which applies the
  precedence chain. :func:`resolve_credential` reads secrets (passwords,
  refresh tokens) from env vars, files, or an interactive prompt.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ValidationError

from authflow.exceptions import ConfigError
from authflow.models import GlobalConfig, ProviderConfig, camelize

_APP_NAME = "authflow"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAMES = ("authflow.json", "authflow.yaml", "authflow.yml")


# --- Provider configuration ---


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into a copy of *base*.

    Nested mappings present on both sides are merged key by key; any other
    value in *override* replaces the one in *base*. Keys absent from
    *override* inherit from *base*. Neither argument is modified.

    Example::

        >>> deep_merge({"login": {"endpoint": "login", "method": "post"}},
        ...            {"login": {"endpoint": "sign-in"}})
        {'login': {'endpoint': 'sign-in', 'method': 'post'}}
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _camelize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Rewrite snake_case keys at every level to their camelCase aliases.

    When a snake_case and a camelCase spelling of the same key both appear,
    their sections are deep-merged in order of appearance.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = _camelize_keys(value)
        name = camelize(key)
        current = result.get(name)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = deep_merge(current, value)
        result[name] = value
    return result


def _camelize_provider(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Return *layer* with its ``provider`` section rewritten to camelCase keys."""
    normalized = dict(layer)
    provider = normalized.get("provider")
    if isinstance(provider, Mapping):
        normalized["provider"] = _camelize_keys(provider)
    return normalized


def build_provider_config(
    overrides: ProviderConfig | Mapping[str, Any] | None = None,
) -> ProviderConfig:
    """Merge a partial override over the default provider configuration.

    Args:
        overrides: ``None`` for the defaults, an already-built
            :class:`~authflow.models.ProviderConfig` (returned as is), or a
            partial mapping using camelCase or snake_case keys.

    Returns:
        A frozen :class:`~authflow.models.ProviderConfig`.

    Raises:
        ConfigError: If the merged configuration fails validation (unknown
            keys, wrong types, unsupported HTTP methods).
    """
    if isinstance(overrides, ProviderConfig):
        return overrides
    defaults = ProviderConfig().model_dump(by_alias=True)
    if not overrides:
        return ProviderConfig.model_validate(defaults)
    merged = deep_merge(defaults, _camelize_keys(overrides))
    try:
        return ProviderConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid provider configuration: {exc}") from exc


class ConfigResolver:
    """Read a frozen :class:`~authflow.models.ProviderConfig` by dotted path.

    Segments may be camelCase aliases (``"requestPass.alwaysFail"``) or
    snake_case field names (``"request_pass.always_fail"``). A missing
    segment resolves to ``None`` instead of raising.

    Args:
        config: The merged provider configuration.
        fallbacks: Values returned for specific paths when they resolve to
            ``None`` (the provider uses this for its default getters).
    """

    def __init__(
        self,
        config: ProviderConfig,
        fallbacks: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config = config
        self._fallbacks = dict(fallbacks or {})

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def get(self, path: str) -> Any:
        """Resolve *path* against the configuration, or return ``None``."""
        value: Any = self._config
        for segment in path.split("."):
            value = _config_step(value, segment)
            if value is None:
                break
        if value is None:
            return self._fallbacks.get(path)
        return value


def _config_step(value: Any, segment: str) -> Any:
    if isinstance(value, BaseModel):
        fields = type(value).model_fields
        if segment in fields:
            return getattr(value, segment)
        for name, field in fields.items():
            if field.alias == segment:
                return getattr(value, name)
        return None
    if isinstance(value, Mapping):
        return value.get(segment)
    return None


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/authflow/`` (default ``~/.config/authflow/``).
    On macOS/Windows: ``~/.authflow/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/authflow/`` (default ``~/.local/share/authflow/``).
    On macOS/Windows: ``~/.authflow/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse a JSON or YAML config file into a dict.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must contain an object")
    return data


def global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~authflow.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_config_file(path)
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def find_project_config() -> Optional[Path]:
    """Return the first project config file found in the working directory."""
    for name in _PROJECT_CONFIG_FILENAMES:
        path = Path.cwd() / name
        if path.is_file():
            return path
    return None


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./authflow.json`` or ``./authflow.yaml``.

    The file uses the same keys as the global config (``base_url``,
    ``request``, ``output``, ``provider``) and sits between the global
    config and environment variables in the precedence chain.

    Returns:
        The parsed data, or ``None`` if no project config exists.
    """
    path = find_project_config()
    if path is None:
        return None
    return _read_config_file(path)


# --- Precedence resolution ---


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_config: Optional[str] = None,
) -> GlobalConfig:
    """Resolve CLI config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_base_url``, ``cli_format``, ``cli_config`` file)
        2. Environment variables (``AUTHFLOW_BASE_URL``)
        3. Project config (``./authflow.json`` / ``./authflow.yaml``)
        4. User config (``~/.config/authflow/config.json``)
        5. Defaults

    Provider overrides from every file layer are normalised to camelCase
    keys and deep-merged in the same order, so a project file only needs
    the keys it changes, whichever spelling each layer uses.

    Returns:
        The effective :class:`~authflow.models.GlobalConfig`.

    Raises:
        ConfigError: If any layer is invalid.
    """
    # 5 + 4. Defaults and user config
    data = _camelize_provider(load_global_config().model_dump(mode="python"))

    # 3. Project-local config
    project = load_project_config()
    if project is not None:
        data = deep_merge(data, _camelize_provider(project))

    # 1. Explicit config file from the command line
    if cli_config is not None:
        path = Path(cli_config).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        data = deep_merge(data, _camelize_provider(_read_config_file(path)))

    try:
        config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    # 2. Environment, then 1. CLI flags
    env_base_url = os.environ.get("AUTHFLOW_BASE_URL")
    if cli_base_url is not None:
        config.base_url = cli_base_url
    elif env_base_url:
        config.base_url = env_base_url

    if cli_format is not None:
        config.output.format = cli_format

    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user without echo (requires a TTY)

    Args:
        source: The source descriptor string.

    Returns:
        The resolved secret.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Password: ")

    raise ConfigError(f"Unknown credential source format: {source}")
