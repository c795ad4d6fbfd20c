"""API connection settings for the website persistence service.

Settings are resolved in order from explicit arguments (CLI options), the
environment, and ``~/.config/site-composer/config.toml``:

.. code-block:: toml

    [api]
    base_url = "https://builder.example.com/api"
    token = "..."
    tenant = "my-community"
    timeout = 10.0

The config path can be overridden with ``SITE_COMPOSER_CONFIG_FILE``.
"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

import tomlkit

DEFAULT_CONFIG_PATH = Path(
    os.getenv(
        "SITE_COMPOSER_CONFIG_FILE",
        Path.home() / ".config" / "site-composer" / "config.toml",
    )
)
DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT = 10.0

ENV_API_URL = "SITE_COMPOSER_API_URL"
ENV_TOKEN = "SITE_COMPOSER_TOKEN"  # noqa: S105 - environment variable name
ENV_TENANT = "SITE_COMPOSER_TENANT"

_CONFIG_FILE_MODE = 0o600


class SettingsError(ValueError):
    """Raised when stored settings cannot be read or are malformed."""


def normalize_api_url(url: str) -> str:
    """Strip trailing slashes and ensure the URL ends with ``/api``.

    Examples
    --------
    >>> normalize_api_url("https://builder.example.com/")
    'https://builder.example.com/api'
    >>> normalize_api_url("https://builder.example.com/api")
    'https://builder.example.com/api'
    """
    trimmed = url.strip().rstrip("/")
    if not trimmed:
        msg = "API URL cannot be empty"
        raise SettingsError(msg)
    return trimmed if trimmed.endswith("/api") else f"{trimmed}/api"


@dc.dataclass(slots=True)
class ApiSettings:
    """Resolved connection settings for :class:`WebsiteClient`."""

    base_url: str = DEFAULT_API_URL
    token: str | None = None
    tenant: str | None = None
    timeout: float = DEFAULT_TIMEOUT


def load_settings(path: Path = DEFAULT_CONFIG_PATH) -> ApiSettings:
    """Read the ``[api]`` table from ``path``; missing files give defaults."""
    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ApiSettings()
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse settings TOML at {path}"
        raise SettingsError(msg) from exc

    table = doc.get("api")
    data: dict[str, typ.Any] = dict(table.items()) if table else {}
    timeout = data.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        msg = f"'timeout' in {path} must be a number"
        raise SettingsError(msg)
    return ApiSettings(
        base_url=normalize_api_url(str(data.get("base_url") or DEFAULT_API_URL)),
        token=_optional(data.get("token")),
        tenant=_optional(data.get("tenant")),
        timeout=float(timeout),
    )


def _optional(value: object | None) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def save_settings(settings: ApiSettings, *, path: Path = DEFAULT_CONFIG_PATH) -> None:
    """Persist ``settings`` into ``config.toml`` preserving other tables."""
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        doc = tomlkit.document()
    except tomlkit.exceptions.ParseError as exc:
        msg = f"Unable to parse settings TOML at {path}"
        raise SettingsError(msg) from exc

    api_table = doc.get("api")
    if not isinstance(api_table, tomlkit.items.Table):
        api_table = tomlkit.table()

    def _set(key: str, value: str | float | None) -> None:
        if value is None:
            api_table.pop(key, None)
        else:
            api_table[key] = value

    _set("base_url", settings.base_url)
    _set("token", settings.token)
    _set("tenant", settings.tenant)
    _set("timeout", settings.timeout)
    doc["api"] = api_table

    path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    os.chmod(path, _CONFIG_FILE_MODE)


def resolve_settings(
    *,
    config_path: Path = DEFAULT_CONFIG_PATH,
    base_url: str | None = None,
    token: str | None = None,
    tenant: str | None = None,
    timeout: float | None = None,
) -> ApiSettings:
    """Merge CLI values, environment variables, and stored settings."""
    stored = load_settings(config_path)
    return ApiSettings(
        base_url=normalize_api_url(
            base_url or os.getenv(ENV_API_URL) or stored.base_url
        ),
        token=token or os.getenv(ENV_TOKEN) or stored.token,
        tenant=tenant or os.getenv(ENV_TENANT) or stored.tenant,
        timeout=timeout if timeout is not None else stored.timeout,
    )


__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_TIMEOUT",
    "ENV_API_URL",
    "ENV_TENANT",
    "ENV_TOKEN",
    "ApiSettings",
    "SettingsError",
    "load_settings",
    "normalize_api_url",
    "resolve_settings",
    "save_settings",
]
