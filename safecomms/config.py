"""Client configuration.

Settings are resolved in order: explicit arguments, then environment
variables, then ``~/.safecomms/config.yaml``, then built-in defaults.
The resolved :class:`ClientConfig` is frozen and shared by every call a
client makes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from safecomms.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Defaults and environment
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://api.safecomms.dev"
DEFAULT_TIMEOUT = 30.0

ENV_API_KEY = "SAFECOMMS_API_KEY"
ENV_BASE_URL = "SAFECOMMS_BASE_URL"
ENV_TIMEOUT = "SAFECOMMS_TIMEOUT"
ENV_CONFIG = "SAFECOMMS_CONFIG"

_FILE_KEYS = {"api_key", "base_url", "timeout"}


def default_config_path() -> Path:
    """Return the config file location, honouring ``SAFECOMMS_CONFIG``."""
    override = os.environ.get(ENV_CONFIG, "")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".safecomms" / "config.yaml"


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection settings for a client.

    ``api_key`` is excluded from ``repr`` so the config can be logged or
    printed without leaking the credential.
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError(
                f"API key is required. Pass api_key or set {ENV_API_KEY}."
            )
        base_url = (self.base_url or "").strip().rstrip("/")
        if not base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must start with http:// or https://, got {self.base_url!r}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        object.__setattr__(self, "base_url", base_url)
        object.__setattr__(self, "timeout", float(self.timeout))


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_config_file(path: str | Path | None = None) -> dict[str, Any]:
    """Read settings from a YAML file.

    A missing file yields an empty dict.  Unknown keys are ignored.
    """
    path = Path(path) if path else default_config_path()
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to read config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return {k: v for k, v in data.items() if k in _FILE_KEYS}


def _parse_timeout(value: Any, source: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout from {source}: {value!r}") from exc


def resolve_config(
    api_key: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
    config_path: str | Path | None = None,
) -> ClientConfig:
    """Build a :class:`ClientConfig` from arguments, environment and file.

    Fallbacks apply only to arguments left as ``None``; an explicit empty
    string is validated as given.  The config file is read only when the
    key or the base URL is still unresolved after arguments and
    environment, so an explicitly configured client never depends on it.
    """
    key = api_key if api_key is not None else os.environ.get(ENV_API_KEY) or None
    url = base_url if base_url is not None else os.environ.get(ENV_BASE_URL) or None

    file_values: dict[str, Any] = {}
    if key is None or url is None:
        file_values = load_config_file(config_path)
        if key is None:
            key = file_values.get("api_key") or ""
        if url is None:
            url = file_values.get("base_url") or DEFAULT_BASE_URL

    if timeout is not None:
        resolved_timeout = _parse_timeout(timeout, "argument")
    elif os.environ.get(ENV_TIMEOUT):
        resolved_timeout = _parse_timeout(os.environ[ENV_TIMEOUT], ENV_TIMEOUT)
    elif "timeout" in file_values:
        resolved_timeout = _parse_timeout(file_values["timeout"], "config file")
    else:
        resolved_timeout = DEFAULT_TIMEOUT

    if not isinstance(key, str) or not isinstance(url, str):
        raise ConfigurationError("api_key and base_url must be strings")

    return ClientConfig(api_key=key, base_url=url, timeout=resolved_timeout)
