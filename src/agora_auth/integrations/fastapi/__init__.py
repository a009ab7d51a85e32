from __future__ import annotations

from typing import Optional

from .deps import FastAPIAuthorization
from ..common.auth_factory import AuthDependencies, create_auth_dependencies
from ...admin.settings import AuthSettings
from ...domain.ports import KeyRepository


def create_fastapi_auth(
    settings: AuthSettings,
    repository: Optional[KeyRepository] = None,
) -> FastAPIAuthorization:
    """
    High-level helper for FastAPI apps:

    - Creates AuthDependencies from the key storage / token settings
    - Wraps them in FastAPIAuthorization, exposing dependencies like:

        fastapi_auth.get_current_user
        fastapi_auth.get_optional_user

    Session tokens are minted with `fastapi_auth.auth.issue(user_id)`.
    """
    auth: AuthDependencies = create_auth_dependencies(settings, repository)
    return FastAPIAuthorization(auth=auth)


__all__ = ["FastAPIAuthorization", "create_fastapi_auth"]
