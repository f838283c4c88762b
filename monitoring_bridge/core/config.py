from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_TRUTHY = ("1", "true", "yes", "on")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it’s easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _port(name: str, default: str) -> int:
    raw = _getenv(name, default)
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if not 1 <= port <= 65535:
        raise ValueError(f"{name} must be between 1 and 65535 (got {port})")
    return port


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    host: str
    port: int
    app_state_host: str
    app_state_port: int
    api_key: str | None = None
    state_provider: str | None = None
    state_provider_path: str | None = None

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def app_state_url(self) -> str:
        return f"http://{self.app_state_host}:{self.app_state_port}/ApplicationState"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    app_state_host = _getenv("APP_STATE_HOST", "localhost")
    if not app_state_host:
        raise ValueError("APP_STATE_HOST must be non-empty")

    # The API key is compared byte-for-byte, so only the surrounding
    # whitespace of the env var itself is dropped.
    api_key = _getenv("API_KEY", "") or None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv("LOG_JSON", "false").lower() in _TRUTHY,
        host=_getenv("HOST", "0.0.0.0") or "0.0.0.0",
        port=_port("PORT", "8080"),
        app_state_host=app_state_host,
        app_state_port=_port("APP_STATE_PORT", "20010"),
        api_key=api_key,
        state_provider=_getenv("STATE_PROVIDER", "") or None,
        state_provider_path=_getenv("STATE_PROVIDER_PATH", "") or None,
    )


# Optional: module-level singleton so imports are cheap
SETTINGS = load_settings()
