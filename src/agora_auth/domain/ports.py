from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, Sequence
from uuid import UUID

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .entities import KeyRecord, TokenPayload, UserToken


class TokenCodec(Protocol):
    """
    Port for issuing and verifying signed session tokens.

    Implementations live in the adapters layer (e.g. the Ed25519 codec).
    """

    def encode(
        self,
        payload: TokenPayload,
        ttl: timedelta,
        signing_key: Ed25519PrivateKey,
        token_id: UUID,
        now: datetime,
    ) -> str:
        """
        Sign the payload into a compact token valid from `now` to `now + ttl`.

        Raises:
          - ConfigurationError when the signing key is missing or invalid
        """
        ...

    def decode(
        self,
        token: str,
        trusted_keys: Sequence[Ed25519PublicKey],
        now: datetime,
    ) -> UserToken:
        """
        Decode and verify the given token.

        Should:
          - reject malformed input before any signature work
          - accept a signature made by any of the trusted keys
          - check the validity window and the token identifier
        Raises:
          - MalformedTokenError / TokenDecodeError
          - InvalidCredentialsError (TokenExpiredError, TokenNotYetValidError)
          - InvalidEntityError
        """
        ...


class KeyRepository(Protocol):
    """
    Port for durable, named storage of private signing keys.

    Every implementation is scoped to one name prefix and reports logical
    names only.
    """

    def write(self, key: Ed25519PrivateKey, name: str) -> KeyRecord:
        """Persist `key` under `name`, replacing any existing record."""
        ...

    def read(self, name: str) -> KeyRecord:
        """Raises NotFoundError when no record matches."""
        ...

    def list(self) -> list[KeyRecord]:
        """Every record of the namespace, most recent first."""
        ...

    def delete(self, name: str) -> None:
        """Raises NotFoundError when no record matches."""
        ...
