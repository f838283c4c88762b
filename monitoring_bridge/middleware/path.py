from __future__ import annotations

from starlette.types import ASGIApp, Receive, Scope, Send


class LowercasePathMiddleware:
    """Lowercase the request path before anything else sees it.

    Routes are matched exactly, so ``/API/Metrics`` and ``/api/metrics``
    must reach the same handler.  Plain ASGI: the rewritten scope is
    what every inner layer and the router receive.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            scope = dict(scope)
            scope["path"] = scope["path"].lower()
        await self.app(scope, receive, send)
