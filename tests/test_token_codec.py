import json
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from jwt.utils import base64url_decode, base64url_encode

from agora_auth.adapters.signed_token.codec import SignedTokenCodec
from agora_auth.domain.entities import TokenHeader, TokenPayload
from agora_auth.domain.exceptions import (
    ConfigurationError,
    InvalidCredentialsError,
    InvalidEntityError,
    MalformedTokenError,
    TokenDecodeError,
    TokenExpiredError,
    TokenNotYetValidError,
)

USER_ID = UUID("8a3c2a63-2a0e-4f4c-9d1e-5b7f0c1d2e3f")
TOKEN_ID = UUID("0b6f7a52-4d1c-4e0a-8d3a-1f2e3d4c5b6a")
TTL = timedelta(hours=2)
MICROSECOND = timedelta(microseconds=1)


class UntouchableKeys:
    """Trusted key list that fails the test if signature checking starts."""

    def __iter__(self):
        raise AssertionError("signature verification must not run")

    def __len__(self):
        raise AssertionError("signature verification must not run")


def _segment(document) -> str:
    raw = document if isinstance(document, bytes) else json.dumps(document).encode("utf-8")
    return base64url_encode(raw).decode("ascii")


def _sign(key: Ed25519PrivateKey, header: str, payload: str) -> str:
    signature = key.sign(f"{header}.{payload}".encode("utf-8"))
    return f"{header}.{payload}.{base64url_encode(signature).decode('ascii')}"


@pytest.fixture
def token(codec, signing_key, now):
    return codec.encode(TokenPayload(id=USER_ID), TTL, signing_key, TOKEN_ID, now)


# --------------------------------------------------------------------- #
# encode
# --------------------------------------------------------------------- #


def test_encode_wire_format(token, signing_key, now):
    header, payload, signature = token.split(".")

    assert "=" not in token
    assert json.loads(base64url_decode(header)) == {
        "iat": now.isoformat(),
        "exp": (now + TTL).isoformat(),
        "id": str(TOKEN_ID),
    }
    assert json.loads(base64url_decode(payload)) == {"id": str(USER_ID)}

    raw_signature = base64url_decode(signature)
    assert len(raw_signature) == 64
    # raises InvalidSignature on mismatch
    signing_key.public_key().verify(raw_signature, f"{header}.{payload}".encode("utf-8"))


@pytest.mark.parametrize("missing", [None, b""])
def test_encode_requires_signing_key(codec, now, missing):
    with pytest.raises(ConfigurationError):
        codec.encode(TokenPayload(id=USER_ID), TTL, missing, TOKEN_ID, now)


def test_encode_rejects_public_key(codec, signing_key, now):
    with pytest.raises(ConfigurationError):
        codec.encode(TokenPayload(id=USER_ID), TTL, signing_key.public_key(), TOKEN_ID, now)


def test_encode_accepts_pem_key(codec, signing_key, now):
    pem = signing_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    token = codec.encode(TokenPayload(id=USER_ID), TTL, pem, TOKEN_ID, now)

    decoded = codec.decode(token, [signing_key.public_key()], now)
    assert decoded.payload.id == USER_ID


# --------------------------------------------------------------------- #
# decode: happy paths
# --------------------------------------------------------------------- #


def test_round_trip(codec, token, signing_key, now):
    decoded = codec.decode(token, [signing_key.public_key()], now)

    assert decoded.header == TokenHeader(iat=now, exp=now + TTL, id=TOKEN_ID)
    assert decoded.payload == TokenPayload(id=USER_ID)


def test_naive_times_are_utc(codec, signing_key, now):
    naive = now.replace(tzinfo=None)
    token = codec.encode(TokenPayload(id=USER_ID), TTL, signing_key, TOKEN_ID, naive)

    decoded = codec.decode(token, [signing_key.public_key()], naive + timedelta(minutes=5))
    assert decoded.header.iat == now


@pytest.mark.parametrize("old_first", [True, False])
def test_rotation_tolerance(codec, token, signing_key, now, old_first):
    new_key = Ed25519PrivateKey.generate()
    keys = [new_key.public_key(), signing_key.public_key()]
    if old_first:
        keys.reverse()

    for moment in (now, now + TTL / 2, now + TTL):
        assert codec.decode(token, keys, moment).header.id == TOKEN_ID


# --------------------------------------------------------------------- #
# decode: signature failures
# --------------------------------------------------------------------- #


@pytest.mark.parametrize("byte_index", [0, 31, 63])
def test_tampered_signature(codec, token, signing_key, now, byte_index):
    header, payload, signature = token.split(".")
    raw = bytearray(base64url_decode(signature))
    raw[byte_index] ^= 0x01
    tampered = f"{header}.{payload}.{base64url_encode(bytes(raw)).decode('ascii')}"

    with pytest.raises(InvalidCredentialsError, match="no signature keys"):
        codec.decode(tampered, [signing_key.public_key()], now)


def test_tampered_payload(codec, token, signing_key, now):
    header, _, signature = token.split(".")
    forged = _segment({"id": str(TOKEN_ID)})

    with pytest.raises(InvalidCredentialsError):
        codec.decode(f"{header}.{forged}.{signature}", [signing_key.public_key()], now)


def test_untrusted_key(codec, token, now):
    other = Ed25519PrivateKey.generate()

    with pytest.raises(InvalidCredentialsError, match="no signature keys can decode"):
        codec.decode(token, [other.public_key()], now)


def test_empty_trusted_set(codec, token, now):
    with pytest.raises(InvalidCredentialsError):
        codec.decode(token, [], now)


def test_undecodable_signature(codec, token, signing_key, now):
    header, payload, _ = token.split(".")

    # five base64 characters cannot encode whole bytes
    with pytest.raises(InvalidCredentialsError, match="the signature is invalid"):
        codec.decode(f"{header}.{payload}.AAAAA", [signing_key.public_key()], now)


# --------------------------------------------------------------------- #
# decode: structural failures
# --------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "source",
    [
        "",
        "abcdef",
        "abc.def",
        "ab.cd.e",
        "ab.c$.ef",
        "ab.cd.ef.gh",
        "ab..cd",
        "ab.cd.ef\n",
        "ab=.cd.ef",
        "ab cd.ef.gh",
    ],
)
def test_malformed_input_short_circuits(codec, now, source):
    with pytest.raises(MalformedTokenError):
        codec.decode(source, UntouchableKeys(), now)


def test_oversized_input_short_circuits(now):
    codec = SignedTokenCodec(max_token_length=64)
    source = "a" * 30 + "." + "b" * 30 + "." + "c" * 30

    with pytest.raises(MalformedTokenError, match="exceeds 64"):
        codec.decode(source, UntouchableKeys(), now)


def test_undecodable_header(codec, signing_key, now):
    token = _sign(signing_key, _segment(b"not json"), _segment({"id": str(USER_ID)}))

    with pytest.raises(TokenDecodeError) as info:
        codec.decode(token, [signing_key.public_key()], now)
    assert not isinstance(info.value, InvalidCredentialsError)


@pytest.mark.parametrize(
    "header",
    [
        {"iat": "yesterday", "exp": "2020-05-04T10:00:00+00:00", "id": str(TOKEN_ID)},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": 12, "id": str(TOKEN_ID)},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00"},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00", "id": "nope"},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00", "id": 12345},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00", "id": {}},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00", "id": True},
        {"iat": "2020-05-04T08:00:00+00:00", "exp": "2020-05-04T10:00:00+00:00", "id": None},
        ["not", "an", "object"],
    ],
)
def test_invalid_header_content(codec, signing_key, now, header):
    token = _sign(signing_key, _segment(header), _segment({"id": str(USER_ID)}))

    with pytest.raises(TokenDecodeError, match="header"):
        codec.decode(token, [signing_key.public_key()], now)


@pytest.mark.parametrize(
    "payload",
    [{"user": "someone"}, {"id": "nope"}, {"id": 12345}, {"id": {}}, {"id": True}, {"id": None}],
)
def test_invalid_payload_content(codec, signing_key, now, payload):
    header = {"iat": now.isoformat(), "exp": (now + TTL).isoformat(), "id": str(TOKEN_ID)}
    token = _sign(signing_key, _segment(header), _segment(payload))

    with pytest.raises(TokenDecodeError, match="payload"):
        codec.decode(token, [signing_key.public_key()], now)


# --------------------------------------------------------------------- #
# decode: content checks
# --------------------------------------------------------------------- #


def test_nil_token_id(codec, signing_key, now):
    token = codec.encode(TokenPayload(id=USER_ID), TTL, signing_key, UUID(int=0), now)

    with pytest.raises(InvalidEntityError) as info:
        codec.decode(token, [signing_key.public_key()], now)
    assert info.value.field == "header.id"


def test_expiration_boundary(codec, token, signing_key, now):
    keys = [signing_key.public_key()]
    expires_at = now + TTL

    assert codec.decode(token, keys, expires_at).header.exp == expires_at

    with pytest.raises(TokenExpiredError) as info:
        codec.decode(token, keys, expires_at + MICROSECOND)
    assert isinstance(info.value, InvalidCredentialsError)
    assert expires_at.isoformat() in str(info.value)


def test_issued_at_boundary(codec, token, signing_key, now):
    keys = [signing_key.public_key()]

    assert codec.decode(token, keys, now).header.iat == now

    with pytest.raises(TokenNotYetValidError) as info:
        codec.decode(token, keys, now - MICROSECOND)
    assert isinstance(info.value, InvalidCredentialsError)
    assert now.isoformat() in str(info.value)


def test_validity_checked_after_signature(codec, token, now):
    # an expired token signed by an unknown key reports the signature first
    with pytest.raises(InvalidCredentialsError, match="no signature keys"):
        codec.decode(token, [Ed25519PrivateKey.generate().public_key()], now + TTL * 10)


def test_decode_with_timezone_offset(codec, token, signing_key, now):
    elsewhere = now.astimezone(timezone(timedelta(hours=9)))
    decoded = codec.decode(token, [signing_key.public_key()], elsewhere)
    assert decoded.header.iat == now
    assert isinstance(decoded.header.iat, datetime)
