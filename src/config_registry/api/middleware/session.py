"""
Session middleware.

Resolves the caller's credentials once per request and leaves the outcome
on ``request.state`` for the route dependencies: either ``session`` or
``session_error`` is set.
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from config_registry.auth.session import SessionResolver
from config_registry.core.exceptions import SessionResolutionError

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Attach the resolved session to each request.

    Resolution failures are not raised here; routes that need a session
    raise them through the ``require_session`` dependency so they go
    through the regular exception handlers.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        resolver: SessionResolver,
        public_paths: set[str] | None = None,
    ) -> None:
        """
        Args:
            app: ASGI application
            resolver: Turns request headers into a Session
            public_paths: Path prefixes that skip resolution (e.g. {"/health"})
        """
        super().__init__(app)
        self._resolver = resolver
        self._public_paths = public_paths or set()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request.state.session = None
        request.state.session_error = None

        if not self._is_public_path(request.url.path):
            try:
                session = self._resolver.resolve(request.headers)
            except SessionResolutionError as e:
                request.state.session_error = e
                logger.debug(f"Session resolution failed on {request.url.path}: {e}")
            else:
                request.state.session = session
                logger.debug(f"Request from {session.username} ({session.method}) on {request.url.path}")

        return await call_next(request)

    def _is_public_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self._public_paths)
