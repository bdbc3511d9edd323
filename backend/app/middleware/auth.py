"""
Employee Dashboard Backend — Bearer Token Middleware
=====================================================

What:  The access-control gate in front of every /employees route.
Why:   The API has exactly one shared secret; there are no users, sessions
       or expiry, so a path-scoped middleware is all the gate needs to be.
How:   Compares the Authorization header against the token injected at
       construction. Rejections short-circuit with a 401 JSON envelope.
When:  Innermost of the app middleware, so CORS preflight and request IDs
       are handled before it.

Checks (in order, first failure wins):
    1. No Authorization header           → "Missing Authorization header"
    2. Header does not start "Bearer "   → "Invalid Authorization format..."
    3. Token after the prefix != secret  → "Invalid token"

The gate never reads the body. Paths outside the protected prefix (/, /health,
/docs, unknown routes) pass straight through.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import AuthenticationError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def check_authorization(header: Optional[str], token: str) -> None:
    """
    Validate an Authorization header value against the configured token.

    Raises:
        AuthenticationError: with `reason` set to "missing header",
            "invalid format" or "invalid token"

    An empty configured token never matches, so a deployment without
    AUTH_TOKEN rejects everything instead of accepting "Bearer ".
    """
    if header is None:
        raise AuthenticationError(
            message="Missing Authorization header",
            reason="missing header",
        )
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError(
            message="Invalid Authorization format. Expected: Bearer <token>",
            reason="invalid format",
        )
    presented = header[len(BEARER_PREFIX):]
    if not token or presented != token:
        raise AuthenticationError(message="Invalid token", reason="invalid token")


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """
    Rejects unauthenticated requests under `protected_prefix` with 401.

    Args:
        token:            The deployment-wide secret (from settings.auth_token)
        protected_prefix: Path prefix the gate applies to
    """

    def __init__(self, app, token: str, protected_prefix: str = "/employees"):
        super().__init__(app)
        self._token = token
        self._prefix = protected_prefix.rstrip("/")

    def is_protected(self, path: str) -> bool:
        return path == self._prefix or path.startswith(self._prefix + "/")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.is_protected(request.url.path):
            return await call_next(request)

        try:
            check_authorization(request.headers.get("Authorization"), self._token)
        except AuthenticationError as exc:
            rid = request_id_var.get("")
            # Never log the presented header; it may be a near-miss of the secret
            logger.warning(
                "[%s] Rejected %s %s: %s",
                rid,
                request.method,
                request.url.path,
                exc.reason,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": True,
                    "message": exc.message,
                    "request_id": rid,
                },
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)
