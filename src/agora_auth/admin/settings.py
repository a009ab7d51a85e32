from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..domain.constants import DEFAULT_MAX_TOKEN_LENGTH, StorageBackend


@dataclass(slots=True)
class AuthSettings:
    """
    Key storage + token wiring settings.

    Host code decides how to construct this (env, config file, etc.).
    """
    backend: StorageBackend
    keys_prefix: str

    # Filesystem backend
    keys_path: Optional[str] = None
    # Cloud backend
    keys_bucket: Optional[str] = None
    gcs_timeout_seconds: float = 30.0

    # Rotation / cache
    max_backups: int = 3
    update_interval_seconds: int = 300

    # Tokens
    token_ttl_seconds: int = 3600
    max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH

    @property
    def update_interval(self) -> timedelta:
        return timedelta(seconds=self.update_interval_seconds)

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(seconds=self.token_ttl_seconds)
