"""
agora_auth.admin

Operational helpers for the signing keys:

- AuthSettings: key storage + token configuration.
- settings_from_env: build AuthSettings from AGORA_* environment variables.
- `python -m agora_auth.admin.cli`: generate, rotate, list and delete keys.
"""

from __future__ import annotations

from .env import settings_from_env
from .settings import AuthSettings

__all__ = [
    "AuthSettings",
    "settings_from_env",
]
