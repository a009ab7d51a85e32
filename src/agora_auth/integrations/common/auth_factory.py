from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from google.cloud import storage

from ...adapters.signed_token.codec import SignedTokenCodec
from ...adapters.storage.filesystem import FileSystemKeyRepository
from ...adapters.storage.gcs import GCSKeyRepository
from ...admin.settings import AuthSettings
from ...application.key_cache import SigningKeyCache
from ...application.use_cases.authenticate import AuthenticateTokenUseCase
from ...application.use_cases.issue import IssueTokenUseCase
from ...application.use_cases.rotate_keys import RotateSigningKeysUseCase
from ...domain.constants import StorageBackend
from ...domain.entities import UserToken
from ...domain.ports import KeyRepository


@dataclass(slots=True)
class AuthDependencies:
    """
    Framework-agnostic auth facade.

    Integrations (FastAPI, CLI, etc.) adapt this to their own
    dependency / command systems.
    """

    key_cache: SigningKeyCache
    issue_use_case: IssueTokenUseCase
    auth_use_case: AuthenticateTokenUseCase

    # --- Core operations --------------------------------------------------

    def authenticate(self, token: str) -> UserToken:
        """Token -> UserToken (or raise auth exceptions)."""
        return self.auth_use_case.execute(token)

    def issue(self, user_id: UUID) -> str:
        """User id -> signed session token."""
        return self.issue_use_case.execute(user_id)


def create_key_repository(settings: AuthSettings) -> KeyRepository:
    """Build the storage backend selected by the settings."""
    if settings.backend is StorageBackend.GCS:
        bucket = storage.Client().bucket(settings.keys_bucket)
        return GCSKeyRepository(
            bucket,
            prefix=settings.keys_prefix,
            timeout=settings.gcs_timeout_seconds,
        )

    return FileSystemKeyRepository(settings.keys_path, prefix=settings.keys_prefix)


def create_rotation_use_case(
        settings: AuthSettings,
        repository: Optional[KeyRepository] = None,
) -> RotateSigningKeysUseCase:
    return RotateSigningKeysUseCase(
        repository=repository or create_key_repository(settings),
        max_backups=settings.max_backups,
    )


def create_auth_dependencies(
        settings: AuthSettings,
        repository: Optional[KeyRepository] = None,
) -> AuthDependencies:
    """
    High-level factory: settings -> AuthDependencies.

    - builds (or reuses) the key repository
    - wires the key cache, the token codec and both use cases
    - returns an AuthDependencies facade.
    """
    repository = repository or create_key_repository(settings)

    key_cache = SigningKeyCache(repository, update_interval=settings.update_interval)
    codec = SignedTokenCodec(max_token_length=settings.max_token_length)

    return AuthDependencies(
        key_cache=key_cache,
        issue_use_case=IssueTokenUseCase(
            token_codec=codec,
            key_cache=key_cache,
            ttl=settings.token_ttl,
        ),
        auth_use_case=AuthenticateTokenUseCase(
            token_codec=codec,
            key_cache=key_cache,
        ),
    )
