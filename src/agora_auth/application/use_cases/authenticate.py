from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..key_cache import SigningKeyCache, utc_now
from ...domain.entities import UserToken
from ...domain.exceptions import (
    AuthenticationError,
    InvalidEntityError,
    NotFoundError,
    StorageError,
)
from ...domain.ports import TokenCodec


@dataclass(slots=True)
class AuthenticateTokenUseCase:
    """
    Application use case:
    - Refresh the trusted key window when it is stale
    - Decode a token via the TokenCodec port against that window

    Framework-agnostic.
    """

    token_codec: TokenCodec
    key_cache: SigningKeyCache
    clock: Callable[[], datetime] = field(default=utc_now)

    def execute(self, token: str) -> UserToken:
        """
        Authenticate a token and return its decoded content.

        Raises:
            MalformedTokenError
            InvalidCredentialsError (TokenExpiredError, TokenNotYetValidError)
            InvalidEntityError
            NotFoundError / StorageError when the key window cannot be loaded
            AuthenticationError
        """
        try:
            self.key_cache.refresh_if_stale()
            return self.token_codec.decode(token, self.key_cache.public_keys(), self.clock())
        except (AuthenticationError, InvalidEntityError, NotFoundError, StorageError):
            # let callers distinguish these explicitly
            raise
        except Exception as exc:
            # Wrap unexpected errors in a generic AuthenticationError
            raise AuthenticationError(f"Token validation failed: {exc}") from exc
