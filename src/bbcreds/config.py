"""Where bbcreds keeps its files, and how it reads them.

Three JSON files make up the persistent state:

* ``config.json`` (config dir) -- :class:`~bbcreds.models.GlobalConfig`.
* ``endpoints.json`` (config dir) -- the configured endpoints, loaded into
  an :class:`~bbcreds.endpoints.EndpointConfiguration`.
* ``credentials.json`` (data dir, relocatable) -- the credential store.

On Linux and the BSDs the directories follow the XDG Base Directory
variables (``$XDG_CONFIG_HOME/bbcreds``, ``$XDG_DATA_HOME/bbcreds``);
elsewhere everything lives under ``~/.bbcreds``.

The credential store location is resolved by :func:`get_credentials_path`
with the precedence CLI flag > ``BBCREDS_CREDENTIALS_FILE`` > global config
> default.  Secrets handed to the CLI are read by :func:`resolve_secret`
from an env var, a file or a prompt, never from argv.

All file writes go through :func:`~bbcreds.files.atomic_write`, so a crash
mid-write never leaves a truncated config behind.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from bbcreds.endpoints import EndpointConfiguration, EndpointConfigurationData
from bbcreds.exceptions import ConfigError
from bbcreds.files import atomic_write
from bbcreds.models import GlobalConfig, Principal

_APP_NAME = "bbcreds"
_CONFIG_FILENAME = "config.json"
_ENDPOINTS_FILENAME = "endpoints.json"
_CREDENTIALS_FILENAME = "credentials.json"
_CREDENTIALS_ENV_VAR = "BBCREDS_CREDENTIALS_FILE"


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: str, fallback: str) -> Path:
    """Resolve and create one of the application directories.

    Args:
        xdg_var: XDG variable consulted on XDG platforms.
        xdg_default: Path under ``$HOME`` used when *xdg_var* is unset.
        fallback: Path under ``~/.bbcreds`` used on other platforms.
    """
    if _is_xdg_platform():
        base = os.environ.get(xdg_var) or str(Path.home() / xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/bbcreds`` (default ``~/.config/bbcreds``), or ``~/.bbcreds``."""
    return _app_dir("XDG_CONFIG_HOME", ".config", "")


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/bbcreds`` (default ``~/.local/share/bbcreds``), or ``~/.bbcreds/data``.

    Holds the default credential store and crash logs.
    """
    return _app_dir("XDG_DATA_HOME", os.path.join(".local", "share"), "data")


# --- JSON files ---


def _read_json(path: Path, what: str) -> Optional[Any]:
    """Return the parsed content of *path*, or ``None`` if it does not exist."""
    if not path.is_file():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def _write_json(path: Path, data: Any) -> None:
    atomic_write(path, json.dumps(data, indent=2) + "\n")


def load_global_config() -> GlobalConfig:
    """Load ``config.json``, or return defaults when it does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or has unknown values.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    data = _read_json(path, "global config")
    if data is None:
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    _write_json(get_config_dir() / _CONFIG_FILENAME, config.model_dump(mode="json"))


def system_principal_for(config: GlobalConfig) -> Principal:
    """Return the elevated principal named by *config*."""
    return Principal(name=config.system_principal, system=True)


def load_endpoint_configuration() -> EndpointConfiguration:
    """Load ``endpoints.json``; without one, only the cloud endpoint exists.

    Raises:
        ConfigError: If the file is not valid JSON or names an unknown
            endpoint type.
    """
    path = get_config_dir() / _ENDPOINTS_FILENAME
    data = _read_json(path, "endpoint configuration")
    if data is None:
        return EndpointConfiguration()
    try:
        return EndpointConfiguration.from_data(EndpointConfigurationData.model_validate(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid endpoint configuration at {path}: {exc}") from exc


def save_endpoint_configuration(configuration: EndpointConfiguration) -> None:
    _write_json(
        get_config_dir() / _ENDPOINTS_FILENAME,
        configuration.to_data().model_dump(mode="json"),
    )


# --- Credential store location ---


def get_credentials_path(config: GlobalConfig, cli_path: Optional[str] = None) -> Path:
    """Return the credential store file.

    The first of these that is set wins:

    1. ``cli_path`` (``--credentials-file``)
    2. ``BBCREDS_CREDENTIALS_FILE``
    3. ``credentials_file`` in the global config
    4. ``<data_dir>/credentials.json``
    """
    for candidate in (cli_path, os.environ.get(_CREDENTIALS_ENV_VAR), config.credentials_file):
        if candidate:
            return Path(candidate).expanduser()
    return get_data_dir() / _CREDENTIALS_FILENAME


# --- Secret sources ---


def resolve_secret(source: str) -> str:
    """Read a secret from *source*.

    Supported forms:
        - ``env:VAR`` -- the value of ``$VAR``, as is.
        - ``file:/path`` -- the file's content, with surrounding whitespace
          stripped.
        - ``prompt`` -- typed interactively without echo; needs a TTY.

    Raises:
        ConfigError: If the source is unknown or cannot be read.
    """
    kind, _, value = source.partition(":")

    if kind == "env" and value:
        secret = os.environ.get(value)
        if secret is None:
            raise ConfigError(f"Environment variable '{value}' is not set (source: {source})")
        return secret

    if kind == "file" and value:
        path = Path(value).expanduser()
        if not path.is_file():
            raise ConfigError(f"Secret file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read secret file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for secret: stdin is not a TTY (source: prompt)")
        return getpass.getpass("Secret: ")

    raise ConfigError(f"Unknown secret source format: {source}")
