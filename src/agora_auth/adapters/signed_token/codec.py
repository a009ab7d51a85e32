import binascii
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Sequence
from uuid import UUID

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jwt.algorithms import OKPAlgorithm
from jwt.exceptions import InvalidKeyError
from jwt.utils import base64url_decode, base64url_encode

from ...domain.constants import DEFAULT_MAX_TOKEN_LENGTH, SIGNED_TOKEN_PATTERN
from ...domain.entities import TokenHeader, TokenPayload, UserToken
from ...domain.exceptions import (
    ConfigurationError,
    InvalidCredentialsError,
    InvalidEntityError,
    MalformedTokenError,
    TokenDecodeError,
    TokenExpiredError,
    TokenNotYetValidError,
)
from ...domain.ports import TokenCodec

logger = logging.getLogger(__name__)

NIL_UUID = UUID(int=0)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _encode_segment(document: Mapping[str, Any]) -> str:
    raw = json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64url_encode(raw).decode("ascii")


def _decode_segment(segment: str, label: str) -> dict[str, Any]:
    try:
        document = json.loads(base64url_decode(segment))
    except (binascii.Error, ValueError) as exc:
        raise TokenDecodeError(f"failed to decode token {label}: {exc}") from exc

    if not isinstance(document, dict):
        raise TokenDecodeError(f"unable to unmarshal token {label}: expected an object")
    return document


def _parse_header(document: Mapping[str, Any]) -> TokenHeader:
    try:
        return TokenHeader(
            iat=_as_utc(datetime.fromisoformat(document["iat"])),
            exp=_as_utc(datetime.fromisoformat(document["exp"])),
            id=UUID(document["id"]),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise TokenDecodeError(f"unable to unmarshal token header: {exc!r}") from exc


def _parse_payload(document: Mapping[str, Any]) -> TokenPayload:
    try:
        return TokenPayload(id=UUID(document["id"]))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise TokenDecodeError(f"unable to unmarshal token payload: {exc!r}") from exc


class SignedTokenCodec(TokenCodec):
    """
    Adapter implementing TokenCodec with Ed25519 signatures.

    Wire format, each segment unpadded base64url:

        <json header>.<json payload>.<signature over "header.payload">

    Verification runs in three stages so the error kinds stay precise and
    no signature work is spent on obviously malformed input:

    1. structure (length bound, segment pattern)
    2. signature, against each trusted key in order
    3. content (identifier, validity window)

    Stateless and safe to share between threads.
    """

    def __init__(self, max_token_length: int = DEFAULT_MAX_TOKEN_LENGTH) -> None:
        self._max_token_length = max_token_length
        self._algorithm = OKPAlgorithm()

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def encode(
        self,
        payload: TokenPayload,
        ttl: timedelta,
        signing_key: Ed25519PrivateKey,
        token_id: UUID,
        now: datetime,
    ) -> str:
        if not signing_key:
            raise ConfigurationError("no signature key provided")

        try:
            key = self._algorithm.prepare_key(signing_key)
        except (InvalidKeyError, ValueError, TypeError) as exc:
            raise ConfigurationError(f"invalid signature key: {exc}") from exc
        if not isinstance(key, Ed25519PrivateKey):
            raise ConfigurationError("signature key must be an ed25519 private key")

        issued_at = _as_utc(now)
        header = TokenHeader(iat=issued_at, exp=issued_at + ttl, id=token_id)

        unsigned = f"{_encode_segment(header.to_dict())}.{_encode_segment(payload.to_dict())}"
        signature = self._algorithm.sign(unsigned.encode("utf-8"), key)
        return f"{unsigned}.{base64url_encode(signature).decode('ascii')}"

    def decode(
        self,
        token: str,
        trusted_keys: Sequence[Ed25519PublicKey],
        now: datetime,
    ) -> UserToken:
        try:
            return self._decode(token, trusted_keys, _as_utc(now))
        except (MalformedTokenError, InvalidCredentialsError, InvalidEntityError) as exc:
            logger.debug("Rejected session token: %s", exc.__class__.__name__)
            raise

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _decode(
        self,
        token: str,
        trusted_keys: Sequence[Ed25519PublicKey],
        now: datetime,
    ) -> UserToken:
        if not token:
            raise MalformedTokenError("token cannot be empty")
        if len(token) > self._max_token_length:
            raise MalformedTokenError(f"token exceeds {self._max_token_length} characters")
        if not SIGNED_TOKEN_PATTERN.fullmatch(token):
            raise MalformedTokenError("token is not a signed token")

        header_segment, payload_segment, signature_segment = token.split(".")

        try:
            signature = base64url_decode(signature_segment)
        except (binascii.Error, ValueError) as exc:
            raise InvalidCredentialsError("the signature is invalid") from exc

        unsigned = f"{header_segment}.{payload_segment}".encode("utf-8")
        if not any(self._algorithm.verify(unsigned, key, signature) for key in trusted_keys):
            raise InvalidCredentialsError("no signature keys can decode the current token signature")

        header = _parse_header(_decode_segment(header_segment, "header"))
        payload = _parse_payload(_decode_segment(payload_segment, "payload"))

        if header.id == NIL_UUID:
            raise InvalidEntityError("header.id", "ID cannot be empty")
        if header.iat > now:
            raise TokenNotYetValidError(f"token is not available until {header.iat.isoformat()}")
        if header.exp < now:
            raise TokenExpiredError(f"token has expired since {header.exp.isoformat()}")

        return UserToken(header=header, payload=payload)
