"""Authentication gate for the Inkwell service.

Resolves an optional Bearer token into an :class:`AuthContext` attached to
``request.state.auth``. The gate never rejects a request; resolvers decide
whether authentication is required.
"""

from typing import Optional

import jwt
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .config import InkwellSettings
from .logger import get_logger
from .security import decode_token
from .types import AuthContext


class AuthMiddleware(BaseHTTPMiddleware):
    """Attach the request's authenticated identity, or mark it anonymous.

    Example:
        from fastapi import FastAPI

        app = FastAPI()
        app.add_middleware(AuthMiddleware, settings=get_inkwell_config())
    """

    def __init__(self, app, settings: InkwellSettings):
        super().__init__(app)
        self.settings = settings
        self.logger = get_logger("auth")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.auth = self.authenticate(request.headers.get("Authorization"))
        return await call_next(request)

    def authenticate(self, auth_header: Optional[str]) -> AuthContext:
        """Resolve an ``Authorization`` header value into an AuthContext."""
        if not auth_header:
            return AuthContext.anonymous()

        # Expect "Bearer <token>" format
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            self.logger.debug("malformed authorization header")
            return AuthContext.anonymous()

        try:
            token_data = decode_token(parts[1], self.settings)
        except jwt.ExpiredSignatureError:
            self.logger.debug("token expired")
            return AuthContext.anonymous()
        except jwt.InvalidTokenError as e:
            self.logger.debug("invalid token", error=str(e))
            return AuthContext.anonymous()

        return AuthContext(is_auth=True, user_id=token_data.userId, email=token_data.email)


def get_auth(request: Request) -> AuthContext:
    """Read the AuthContext set by :class:`AuthMiddleware` (anonymous if absent)."""
    return getattr(request.state, "auth", None) or AuthContext.anonymous()
