"""
agora_auth

Stateless session tokens signed with rotating Ed25519 keys, and the
repositories persisting those keys (local filesystem or Google Cloud
Storage).
"""

__version__ = "0.1.0"

from .domain.entities import KeyRecord, TokenHeader, TokenPayload, UserToken
from .domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    InvalidCredentialsError,
    InvalidEntityError,
    KeyDecodeError,
    MalformedTokenError,
    NotFoundError,
    StorageError,
    TokenDecodeError,
    TokenExpiredError,
    TokenNotYetValidError,
)
from .domain.ports import KeyRepository, TokenCodec
from .domain.value_objects import KeyNamespace

from .application.key_cache import SigningKeyCache
from .application.use_cases.authenticate import AuthenticateTokenUseCase
from .application.use_cases.issue import IssueTokenUseCase
from .application.use_cases.rotate_keys import RotateSigningKeysUseCase

from .adapters.signed_token.codec import SignedTokenCodec
from .adapters.storage.filesystem import FileSystemKeyRepository
from .adapters.storage.gcs import GCSKeyRepository

__all__ = [
    "__version__",
    # domain core
    "KeyRecord",
    "TokenHeader",
    "TokenPayload",
    "UserToken",
    "KeyNamespace",
    "KeyRepository",
    "TokenCodec",
    # exceptions
    "AuthenticationError",
    "ConfigurationError",
    "InvalidCredentialsError",
    "InvalidEntityError",
    "KeyDecodeError",
    "MalformedTokenError",
    "NotFoundError",
    "StorageError",
    "TokenDecodeError",
    "TokenExpiredError",
    "TokenNotYetValidError",
    # use cases
    "SigningKeyCache",
    "AuthenticateTokenUseCase",
    "IssueTokenUseCase",
    "RotateSigningKeysUseCase",
    # adapters
    "SignedTokenCodec",
    "FileSystemKeyRepository",
    "GCSKeyRepository",
]
