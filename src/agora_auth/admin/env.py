from __future__ import annotations

import os

from .settings import AuthSettings
from ..domain.constants import DEFAULT_MAX_TOKEN_LENGTH, StorageBackend
from ..domain.exceptions import ConfigurationError


def settings_from_env() -> AuthSettings:
    def _int(key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw.strip())
        except ValueError as exc:
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc

    raw_backend = (os.getenv("AGORA_KEYS_BACKEND") or StorageBackend.FILESYSTEM.value).strip().lower()
    try:
        backend = StorageBackend(raw_backend)
    except ValueError as exc:
        allowed = ", ".join(b.value for b in StorageBackend)
        raise ConfigurationError(
            f"Unknown AGORA_KEYS_BACKEND {raw_backend!r}, allowed values are: {allowed}"
        ) from exc

    prefix = os.getenv("AGORA_KEYS_PREFIX")
    keys_path = os.getenv("AGORA_KEYS_PATH")
    keys_bucket = os.getenv("AGORA_KEYS_BUCKET")

    required = [("AGORA_KEYS_PREFIX", prefix)]
    if backend is StorageBackend.FILESYSTEM:
        required.append(("AGORA_KEYS_PATH", keys_path))
    else:
        required.append(("AGORA_KEYS_BUCKET", keys_bucket))

    missing = [n for n, v in required if not v]
    if missing:
        raise ConfigurationError(f"Missing key storage settings: {', '.join(missing)}")

    return AuthSettings(
        backend=backend,
        keys_prefix=prefix,
        keys_path=keys_path,
        keys_bucket=keys_bucket,
        max_backups=_int("AGORA_KEYS_BACKUPS", 3),
        update_interval_seconds=_int("AGORA_KEYS_UPDATE_INTERVAL", 300),
        token_ttl_seconds=_int("AGORA_TOKEN_TTL", 3600),
        max_token_length=_int("AGORA_TOKEN_MAX_LENGTH", DEFAULT_MAX_TOKEN_LENGTH),
    )
