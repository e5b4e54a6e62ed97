"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module backs the ``traktclient`` command line:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.traktclient/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **User config** -- ``<config dir>/config.json``, a JSON object of
  :class:`~traktclient.models.Settings` fields.
* **Project config** -- ``./traktclient.json`` in the working directory.
* **Precedence resolution** -- :func:`resolve_settings` merges explicit
  overrides, environment variables, project config and user config.
* **Token file** -- :func:`load_token` / :func:`save_token` persist the
  exported token record at ``<data dir>/token.json``.

The library itself never touches these files; :class:`~traktclient.trakt.Trakt`
only consumes the resolved settings and token records handed to it.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from traktclient.exceptions import ConfigurationError
from traktclient.models import Settings, TokenRecord

_APP_NAME = "traktclient"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "traktclient.json"
_TOKEN_FILENAME = "token.json"

ENV_VARS: dict[str, str] = {
    "client_id": "TRAKT_CLIENT_ID",
    "client_secret": "TRAKT_CLIENT_SECRET",
    "redirect_uri": "TRAKT_REDIRECT_URI",
    "api_url": "TRAKT_API_URL",
}
"""Settings field to environment variable."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
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

    On Linux/BSD: ``$XDG_CONFIG_HOME/traktclient/`` (default ``~/.config/traktclient/``).
    On macOS/Windows: ``~/.traktclient/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (stored token), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/traktclient/`` (default ``~/.local/share/traktclient/``).
    On macOS/Windows: ``~/.traktclient/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given the file permissions are set before the rename.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid {label} at {path}: expected a JSON object")
    return data


# --- User and project config ---


def user_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_user_config() -> dict[str, Any]:
    """Load ``<config dir>/config.json``, or ``{}`` when it does not exist.

    Raises:
        ConfigurationError: If the file is not a JSON object.
    """
    return _read_json_object(user_config_path(), "user config") or {}


def save_user_config(values: dict[str, Any]) -> Path:
    """Persist *values* as the user config. Returns the file path."""
    path = user_config_path()
    _atomic_write(path, json.dumps(values, indent=2) + "\n", mode=0o600)
    return path


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./traktclient.json``, or ``None`` when it does not exist.

    Raises:
        ConfigurationError: If the file is not a JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project config")


# --- Precedence resolution ---


def resolve_settings(**overrides: Any) -> Settings:
    """Resolve :class:`~traktclient.models.Settings` with full precedence.

    Precedence (high to low):
        1. Keyword *overrides* whose value is not ``None`` (CLI flags)
        2. Environment variables (:data:`ENV_VARS`)
        3. Project config (``./traktclient.json``)
        4. User config (``<config dir>/config.json``)
        5. Defaults

    Raises:
        ConfigurationError: If a config file is invalid or the merged values
            fail validation.
    """
    values: dict[str, Any] = {}
    values.update(load_user_config())

    project = load_project_config()
    if project is not None:
        values.update(project)

    for field, env_var in ENV_VARS.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[field] = env_value

    values.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings.model_validate(values)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


# --- Token file ---


def token_path() -> Path:
    return get_data_dir() / _TOKEN_FILENAME


def load_token() -> Optional[TokenRecord]:
    """Return the stored token record, or ``None`` if none is stored.

    Raises:
        ConfigurationError: If the token file is unreadable.
    """
    data = _read_json_object(token_path(), "token file")
    if data is None:
        return None
    try:
        return TokenRecord.model_validate(data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid token file at {token_path()}: {exc}") from exc


def save_token(token: dict[str, Any]) -> Path:
    """Persist an exported token record with ``0o600`` permissions."""
    path = token_path()
    record = TokenRecord.model_validate(token)
    _atomic_write(path, json.dumps(record.model_dump(), indent=2) + "\n", mode=0o600)
    return path


def delete_token() -> bool:
    """Remove the stored token. Returns whether a file was deleted."""
    path = token_path()
    if not path.is_file():
        return False
    path.unlink()
    return True


# --- Pending authorization state ---


def _pending_state_path() -> Path:
    return get_data_dir() / "pending_state"


def save_pending_state(state: str) -> None:
    """Remember the CSRF state of the last authorization URL printed by the CLI."""
    _atomic_write(_pending_state_path(), state + "\n", mode=0o600)


def pop_pending_state() -> Optional[str]:
    """Return and forget the remembered CSRF state, or ``None`` if there is none."""
    path = _pending_state_path()
    if not path.is_file():
        return None
    state = path.read_text(encoding="utf-8").strip()
    path.unlink()
    return state or None
