"""Remote server configuration values."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import Final

from larder import __version__
from larder.domain.concurrency import DEFAULT_MAX_IN_FLIGHT

from .env import optional_env_var, positive_int_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

log = getLogger(__name__)

APP_NAME: Final[str] = "larder"
REMOTE_ENV_VAR: Final[str] = "LARDER_REMOTE"
MAX_IN_FLIGHT_ENV_VAR: Final[str] = "LARDER_MAX_IN_FLIGHT"
RATE_LIMIT_ENV_VAR: Final[str] = "LARDER_RATE_LIMIT"
REMOTE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class RemoteConfig:
    """Where a remote lives and how hard to talk to it."""

    base_url: str
    resilience: ResilienceConfig
    max_in_flight: int = DEFAULT_MAX_IN_FLIGHT


def get_config_path() -> Path:
    """Return the path of the user configuration file."""

    base = os.getenv("XDG_CONFIG_HOME")
    base_path = Path(base) if base else (Path.home() / ".config")
    return (base_path / f"{APP_NAME}.toml").expanduser()


def get_remote_config(
    base_url: str | None = None,
    *,
    read_only: bool = False,
    config_path: Path | None = None,
) -> RemoteConfig:
    """Resolve a remote from the argument, the environment or the config file.

    Remotes that are only read from get an in-memory response cache; remotes
    that are written to are never cached.
    """

    url = _clean_url(base_url) or optional_env_var(REMOTE_ENV_VAR)
    if url is None:
        url = _default_remote(config_path or get_config_path())
    if url is None:
        raise MissingConfigurationError(
            f"No remote given: pass one, set {REMOTE_ENV_VAR} or add default_remote "
            f"to {config_path or get_config_path()}"
        )
    url = url.rstrip("/")

    return RemoteConfig(
        base_url=url,
        resilience=ResilienceConfig(
            name=APP_NAME,
            base_url=url,
            timeout_seconds=REMOTE_TIMEOUT_SECONDS,
            ratelimit=_rate_limit(),
            cache=CacheConfig() if read_only else None,
            default_headers={"User-Agent": f"{APP_NAME}/{__version__}"},
        ),
        max_in_flight=positive_int_env_var(MAX_IN_FLIGHT_ENV_VAR, DEFAULT_MAX_IN_FLIGHT),
    )


def _rate_limit() -> RateLimit | None:
    if optional_env_var(RATE_LIMIT_ENV_VAR) is None:
        return None
    return RateLimit(max_calls=positive_int_env_var(RATE_LIMIT_ENV_VAR, 1), per_seconds=1.0)


def _clean_url(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def _default_remote(path: Path) -> str | None:
    try:
        with path.open("rb") as handle:
            settings = tomllib.load(handle)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid configuration file {path}: {exc}") from exc

    value = settings.get("default_remote")
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"default_remote in {path} must be a string")
    log.debug("Using default remote from %s", path)
    return _clean_url(value)
