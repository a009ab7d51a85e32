"""
PEM/PKCS8 (de)serialization of Ed25519 private keys.

Shared by every storage backend so that records written by one can be read
by the other, and by standard tooling (`openssl pkey -in <file>`).
"""

from __future__ import annotations

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ...domain.constants import PEM_LABEL
from ...domain.exceptions import KeyDecodeError, StorageError

_PEM_HEADER = f"-----BEGIN {PEM_LABEL}-----".encode("ascii")


def dump_private_key(key: Ed25519PrivateKey, name: str) -> bytes:
    if not isinstance(key, Ed25519PrivateKey):
        raise StorageError("encode", name, f"expected an ed25519 private key, got {type(key).__name__}")

    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def load_private_key(data: bytes, name: str) -> Ed25519PrivateKey:
    if _PEM_HEADER not in data:
        raise KeyDecodeError(
            "decode", name, "file does not contain a valid ed25519 private key: no valid PEM block found",
        )

    try:
        key = serialization.load_pem_private_key(data, password=None)
    except UnsupportedAlgorithm as exc:
        raise KeyDecodeError(
            "decode", name, "file does not contain a valid ed25519 private key: unexpected key type",
        ) from exc
    except (ValueError, TypeError) as exc:
        # Truncated or corrupted PKCS8 body; the parser message carries no key bytes.
        raise KeyDecodeError(
            "decode", name, "file does not contain a valid ed25519 private key: corrupted or truncated data",
        ) from exc

    if not isinstance(key, Ed25519PrivateKey):
        raise KeyDecodeError(
            "decode",
            name,
            f"file does not contain a valid ed25519 private key: unexpected key type {type(key).__name__}",
        )

    return key
