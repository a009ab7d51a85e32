from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from .security import SESSION_COOKIE_NAME, bearer_scheme, find_session_token
from ..common.auth_factory import AuthDependencies
from ...domain.entities import UserToken
from ...domain.exceptions import (
    AuthenticationError,
    InvalidEntityError,
    NotFoundError,
    StorageError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)


def _to_http_error(exc: Exception) -> HTTPException:
    """Map the auth error taxonomy onto HTTP responses."""
    if isinstance(exc, TokenExpiredError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    if isinstance(exc, (AuthenticationError, InvalidEntityError)):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    # Storage failures: no detail leaves the service.
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")


@dataclass(slots=True)
class FastAPIAuthorization:
    """
    FastAPI integration for agora_auth, built on top of the
    framework-agnostic AuthDependencies facade.

    Usage:

        fastapi_auth = create_fastapi_auth(settings_from_env())

        @router.get("/me")
        async def me(token: UserToken = Depends(fastapi_auth.get_current_user)):
            return {"id": str(token.user_id)}
    """

    auth: AuthDependencies
    cookie_name: str = SESSION_COOKIE_NAME

    async def get_current_user(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> UserToken:
        """Dependency: Require authentication."""
        token = find_session_token(request, credentials, self.cookie_name)
        if token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )

        try:
            return self.auth.authenticate(token)
        except (AuthenticationError, InvalidEntityError, NotFoundError) as exc:
            raise _to_http_error(exc) from exc
        except StorageError as exc:
            logger.error("Unable to load signing keys: %s", exc)
            raise _to_http_error(exc) from exc

    async def get_optional_user(
            self,
            request: Request,
            credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    ) -> UserToken | None:
        """Dependency: Optional authentication."""
        token = find_session_token(request, credentials, self.cookie_name)
        if token is None:
            return None

        try:
            return self.auth.authenticate(token)
        except (AuthenticationError, InvalidEntityError):
            # bad token -> treat as anonymous
            return None
