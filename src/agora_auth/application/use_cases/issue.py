from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID, uuid4

from ..key_cache import SigningKeyCache, utc_now
from ...domain.entities import TokenPayload
from ...domain.exceptions import ConfigurationError
from ...domain.ports import TokenCodec


@dataclass(slots=True)
class IssueTokenUseCase:
    """
    Application use case:
    - Pick the current signing key from the cache
    - Mint a session token for a user, valid for `ttl`
    """

    token_codec: TokenCodec
    key_cache: SigningKeyCache
    ttl: timedelta
    clock: Callable[[], datetime] = field(default=utc_now)
    id_factory: Callable[[], UUID] = field(default=uuid4)

    def execute(self, user_id: UUID) -> str:
        """
        Raises:
            ConfigurationError when no signing key has been stored yet
            StorageError when the key cache cannot be refreshed
        """
        self.key_cache.refresh_if_stale()

        signing_key = self.key_cache.private_key()
        if signing_key is None:
            raise ConfigurationError("no signing key available, rotate keys first")

        return self.token_codec.encode(
            TokenPayload(id=user_id),
            self.ttl,
            signing_key,
            self.id_factory(),
            self.clock(),
        )
