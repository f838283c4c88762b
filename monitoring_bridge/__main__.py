"""Run the bridge as a process.

RUN:  python -m monitoring_bridge      (or the ``monitoring-bridge`` script)

Start-up is fail-fast: the provider must load and answer a ping, and
the listening port must bind, before uvicorn takes over.  Each failure
is logged with what to do about it and the process exits with status 1.

The socket is bound here rather than by uvicorn so a permission error
can be turned into concrete remediation steps instead of uvicorn's
generic "error while attempting to bind" line.

SIGINT/SIGTERM are handled by uvicorn: it stops accepting, lets
in-flight requests finish, then runs the app's shutdown (which closes
the provider).
"""

from __future__ import annotations

import errno
import logging
import os
import socket
import sys

import uvicorn

from monitoring_bridge.api.responses import AVAILABLE_ENDPOINTS
from monitoring_bridge.app_factory import create_app
from monitoring_bridge.core.config import Settings, load_settings
from monitoring_bridge.core.logging import setup_logging
from monitoring_bridge.services.state_provider import (
    StateProvider,
    StateProviderError,
    load_state_provider,
)

logger = logging.getLogger("monitoring_bridge")

EXIT_FAILURE = 1


def bind_listener(host: str, port: int) -> socket.socket:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def bind_remediation(port: int, exc: OSError) -> list[str]:
    """Operator-facing instructions for a failed bind."""
    if isinstance(exc, PermissionError) or exc.errno in (errno.EACCES, errno.EPERM):
        interpreter = os.path.realpath(sys.executable)
        return [
            f"Access denied when binding port {port}.",
            "Fix it with ONE of these:",
            "  Option 1 - Use an unprivileged port (1024 or above):",
            "    PORT=8080 python -m monitoring_bridge",
            "  Option 2 - Allow this interpreter to bind low ports:",
            f"    sudo setcap 'cap_net_bind_service=+ep' {interpreter}",
            "  Option 3 - Run the bridge as a privileged user",
        ]
    if exc.errno == errno.EADDRINUSE:
        return [
            f"Port {port} is already in use.",
            "Stop the other process or set PORT to a different port.",
            f"Hint: lsof -i :{port} | grep LISTEN",
        ]
    return [f"Could not bind port {port}: {exc}"]


def check_provider(provider: StateProvider, settings: Settings) -> bool:
    logger.info("Testing connection to %s ...", settings.app_state_url)
    try:
        alive = provider.ping()
    except Exception as e:
        logger.error(
            "Cannot reach the ApplicationState service at %s:%d: %s\n"
            "Check that the application is running and that APP_STATE_HOST / "
            "APP_STATE_PORT point at it.",
            settings.app_state_host,
            settings.app_state_port,
            e,
        )
        return False
    if not alive:
        logger.error("ApplicationState ping returned false; refusing to start")
        return False
    logger.info("Connection OK")
    return True


def _log_ready(settings: Settings) -> None:
    if settings.api_key:
        logger.info("Authentication: ENABLED (API key %s)", "*" * len(settings.api_key))
    else:
        logger.info("Authentication: DISABLED (set API_KEY to enable)")
    logger.info("READY - available endpoints:")
    for path in AVAILABLE_ENDPOINTS:
        logger.info("  http://localhost:%d%s", settings.port, path)


def main() -> int:
    settings = load_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)

    logger.info("GT monitoring bridge starting")
    logger.info(
        "ApplicationState: host=%s port=%d",
        settings.app_state_host,
        settings.app_state_port,
    )

    try:
        provider = load_state_provider(settings)
    except StateProviderError as e:
        logger.error("Could not load the state provider:\n%s", e)
        return EXIT_FAILURE

    if not check_provider(provider, settings):
        return EXIT_FAILURE

    try:
        sock = bind_listener(settings.host, settings.port)
    except OSError as e:
        logger.error("\n".join(bind_remediation(settings.port, e)))
        return EXIT_FAILURE

    app = create_app(settings, provider)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        # Logging is already configured; RequestContextMiddleware writes
        # the per-request line.
        log_config=None,
        access_log=False,
    )
    _log_ready(settings)
    uvicorn.Server(config).run(sockets=[sock])
    logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
