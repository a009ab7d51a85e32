from __future__ import annotations

from typing import Optional

from fastapi import Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Registered on routes so the OpenAPI schema advertises bearer auth.
bearer_scheme = HTTPBearer(auto_error=False)

SESSION_COOKIE_NAME = "session_token"


def find_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
    cookie_name: str = SESSION_COOKIE_NAME,
) -> Optional[str]:
    """
    Locate the session token of a request.

    Lookup order: parsed bearer credentials, the raw Authorization header,
    then the session cookie. Returns None when the request carries no token,
    so anonymous and malformed requests can be told apart by the caller.
    """
    candidates = []
    if credentials is not None:
        candidates.append(credentials.credentials)

    scheme, _, value = (request.headers.get("Authorization") or "").partition(" ")
    if scheme.lower() == "bearer":
        candidates.append(value)

    candidates.append(request.cookies.get(cookie_name))

    for candidate in candidates:
        token = (candidate or "").strip()
        if token:
            return token
    return None
