from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)


@dataclass(frozen=True, slots=True)
class KeyRecord:
    """
    A persisted signing key.

    `name` is the logical name, without the repository prefix.
    `date` is the modification time observed by the storage backend.
    """
    key: Ed25519PrivateKey
    name: str
    date: datetime

    @property
    def public_key(self) -> Ed25519PublicKey:
        return self.key.public_key()


@dataclass(frozen=True, slots=True)
class TokenHeader:
    """
    Token metadata: validity window and the token's own identifier.
    """
    iat: datetime
    exp: datetime
    id: UUID

    def to_dict(self) -> dict[str, str]:
        return {
            "iat": self.iat.isoformat(),
            "exp": self.exp.isoformat(),
            "id": str(self.id),
        }


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """
    Claims carried by a session token: the authenticated user's identifier.
    """
    id: UUID

    def to_dict(self) -> dict[str, str]:
        return {"id": str(self.id)}


@dataclass(frozen=True, slots=True)
class UserToken:
    header: TokenHeader
    payload: TokenPayload

    @property
    def user_id(self) -> UUID:
        return self.payload.id

    @property
    def expires_at(self) -> datetime:
        return self.header.exp
