"""Access to the remote ApplicationState service.

THE PROVIDER CONTRACT
----------------------
Everything the bridge serves comes from four read-only calls on the
remote application:

  ping()                                   -> bool
  get_running_services()                   -> JSON text or list of dicts
  get_system_usage(include_extended_sessions) -> dict
  get_app_state_summary()                  -> dict

StateProvider is that contract as a typing.Protocol.  The HTTP layer
only ever sees the protocol, so tests hand it a fake and production
hands it HttpStateProvider (or a plugin, see load_state_provider).

Calls are synchronous and may block for as long as the remote takes;
no timeout and no retry is applied here.  Endpoints run them on the
worker thread pool, so a hung call stalls only its own request.

ERRORS
-------
  StateProviderError          base class, anything the provider raised
  ProviderUnavailableError    transport failure, non-2xx, bad payload
  ProviderNotFoundError       configured plugin cannot be located
"""

from __future__ import annotations

import importlib
import logging
import sys
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypeVar, runtime_checkable

import httpx

from monitoring_bridge.core.config import Settings
from monitoring_bridge.core.metrics import PROVIDER_CALL_DURATION, PROVIDER_CALLS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Factory looked up when only STATE_PROVIDER_PATH is configured.
DEFAULT_PLUGIN_FACTORY = "app_state_provider:create_provider"


class StateProviderError(Exception):
    pass


class ProviderUnavailableError(StateProviderError):
    pass


class ProviderNotFoundError(StateProviderError):
    pass


@runtime_checkable
class StateProvider(Protocol):
    def ping(self) -> bool:
        """Liveness check of the remote application."""
        ...

    def get_running_services(self) -> str | list[dict[str, Any]]:
        """Service records, possibly still JSON-encoded."""
        ...

    def get_system_usage(self, include_extended_sessions: bool) -> dict[str, Any]:
        ...

    def get_app_state_summary(self) -> dict[str, Any]:
        ...


class HttpStateProvider:
    """StateProvider backed by the ApplicationState HTTP endpoint.

    Each operation is a GET on ``{base_url}/<Operation>`` returning JSON.
    """

    def __init__(
        self,
        *,
        base_url: str,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        # timeout=None: a slow remote is waited for, never cut off.
        self._client = client or httpx.Client(base_url=self._base_url, timeout=None)
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpStateProvider:
        return cls(base_url=settings.app_state_url)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def ping(self) -> bool:
        return bool(self._get("Ping"))

    def get_running_services(self) -> str | list[dict[str, Any]]:
        return self._get("GetRunningServices")

    def get_system_usage(self, include_extended_sessions: bool) -> dict[str, Any]:
        return self._get(
            "GetSystemUsage",
            params={"includeExtendedSessions": str(include_extended_sessions).lower()},
        )

    def get_app_state_summary(self) -> dict[str, Any]:
        return self._get("GetAppStateSummary")

    def _get(self, operation: str, params: dict[str, str] | None = None) -> Any:
        try:
            response = self._client.get(f"/{operation}", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailableError(
                f"{operation} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(
                f"{operation} failed: cannot reach {self._base_url} ({e})"
            ) from e
        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailableError(
                f"{operation} returned a body that is not JSON"
            ) from e


class InstrumentedStateProvider:
    """Wraps a provider with call metrics and failure logging.

    Errors are logged once here and re-raised unchanged; deciding what
    the client sees is the caller's job.
    """

    def __init__(self, inner: StateProvider) -> None:
        self._inner = inner

    @property
    def inner(self) -> StateProvider:
        return self._inner

    def close(self) -> None:
        close = getattr(self._inner, "close", None)
        if callable(close):
            close()

    def ping(self) -> bool:
        return self._call("ping", self._inner.ping)

    def get_running_services(self) -> str | list[dict[str, Any]]:
        return self._call("get_running_services", self._inner.get_running_services)

    def get_system_usage(self, include_extended_sessions: bool) -> dict[str, Any]:
        return self._call(
            "get_system_usage",
            lambda: self._inner.get_system_usage(include_extended_sessions),
        )

    def get_app_state_summary(self) -> dict[str, Any]:
        return self._call("get_app_state_summary", self._inner.get_app_state_summary)

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        start = time.monotonic()
        try:
            result = fn()
        except Exception as e:
            PROVIDER_CALLS.labels(operation=operation, outcome="error").inc()
            logger.warning(
                "Provider call %s failed: %s",
                operation,
                e,
                extra={"operation": operation},
            )
            raise
        finally:
            PROVIDER_CALL_DURATION.labels(operation=operation).observe(
                time.monotonic() - start
            )
        PROVIDER_CALLS.labels(operation=operation, outcome="ok").inc()
        return result


def _import_factory(spec: str, search_path: str | None) -> Callable[[Settings], Any]:
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ProviderNotFoundError(
            f"STATE_PROVIDER must look like 'module:factory' (got {spec!r})"
        )

    if search_path is not None:
        directory = Path(search_path)
        if not directory.is_dir():
            raise ProviderNotFoundError(
                "Could not find the state provider directory at the configured path.\n"
                f"Searched: {directory}\n"
                "Please check the STATE_PROVIDER_PATH setting."
            )
        if str(directory) not in sys.path:
            sys.path.insert(0, str(directory))

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        where = f" in {search_path}" if search_path else ""
        raise ProviderNotFoundError(
            f"Could not import state provider module {module_name!r}{where}: {e}"
        ) from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ProviderNotFoundError(
            f"Could not find callable {attr!r} in state provider module {module_name!r}"
        )
    return factory


def load_state_provider(settings: Settings) -> StateProvider:
    """Build the provider the settings ask for.

    Without STATE_PROVIDER / STATE_PROVIDER_PATH this is the HTTP client
    for APP_STATE_HOST:APP_STATE_PORT.  Otherwise the named factory is
    imported (from STATE_PROVIDER_PATH first, when given) and called
    with the settings.
    """
    spec = settings.state_provider
    if spec is None and settings.state_provider_path is not None:
        spec = DEFAULT_PLUGIN_FACTORY

    if spec is None:
        logger.info("Using HTTP state provider at %s", settings.app_state_url)
        return HttpStateProvider.from_settings(settings)

    factory = _import_factory(spec, settings.state_provider_path)
    provider = factory(settings)
    if not isinstance(provider, StateProvider):
        raise ProviderNotFoundError(
            f"{spec} returned {type(provider).__name__}, which does not implement "
            "ping/get_running_services/get_system_usage/get_app_state_summary"
        )
    logger.info("Using state provider from %s", spec)
    return provider
