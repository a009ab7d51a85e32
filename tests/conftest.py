from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Optional

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from google.api_core.exceptions import NotFound

from agora_auth.adapters.signed_token.codec import SignedTokenCodec
from agora_auth.domain.entities import KeyRecord
from agora_auth.domain.exceptions import NotFoundError

BASE_TIME = datetime(2020, 5, 4, 8, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = BASE_TIME) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current += delta
        return self.current


# --------------------------------------------------------------------- #
# Google Cloud Storage double
# --------------------------------------------------------------------- #


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name
        self.updated: Optional[datetime] = None

    def upload_from_string(self, data, content_type=None, timeout=None, retry="default"):
        self.bucket.calls.append(("upload", self.name, timeout, retry))
        if self.bucket.fail_with is not None:
            raise self.bucket.fail_with
        self.updated = self.bucket.clock()
        self.bucket.objects[self.name] = (bytes(data), self.updated, content_type)

    def download_as_bytes(self, timeout=None, retry="default"):
        self.bucket.calls.append(("download", self.name, timeout, retry))
        if self.name not in self.bucket.objects:
            raise NotFound(f"No such object: {self.bucket.name}/{self.name}")
        return self.bucket.objects[self.name][0]


class FakeBucket:
    """In-memory stand-in for google.cloud.storage.Bucket."""

    def __init__(self, clock: Callable[[], datetime], name: str = "secret-keys") -> None:
        self.name = name
        self.clock = clock
        self.objects: dict[str, tuple[bytes, datetime, Optional[str]]] = {}
        self.calls: list[tuple] = []
        self.fail_with: Optional[Exception] = None

    def _stored_blob(self, name: str) -> FakeBlob:
        blob = FakeBlob(self, name)
        blob.updated = self.objects[name][1]
        return blob

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)

    def get_blob(self, name, timeout=None, retry="default"):
        self.calls.append(("get", name, timeout, retry))
        if self.fail_with is not None:
            raise self.fail_with
        if name not in self.objects:
            return None
        return self._stored_blob(name)

    def list_blobs(self, prefix=None, timeout=None, retry="default") -> Iterator[FakeBlob]:
        self.calls.append(("list", prefix, timeout, retry))
        if self.fail_with is not None:
            raise self.fail_with
        for name in sorted(self.objects):
            if prefix is None or name.startswith(prefix):
                yield self._stored_blob(name)

    def delete_blob(self, name, timeout=None, retry="default"):
        self.calls.append(("delete", name, timeout, retry))
        if self.fail_with is not None:
            raise self.fail_with
        if name not in self.objects:
            raise NotFound(f"No such object: {self.name}/{name}")
        del self.objects[name]


# --------------------------------------------------------------------- #
# Repository double for use-case tests
# --------------------------------------------------------------------- #


class InMemoryKeyRepository:
    def __init__(self, clock: Callable[[], datetime]) -> None:
        self.clock = clock
        self.records: dict[str, KeyRecord] = {}

    def write(self, key, name):
        record = KeyRecord(key=key, name=name, date=self.clock())
        self.records[name] = record
        return record

    def read(self, name):
        if name not in self.records:
            raise NotFoundError(name)
        return self.records[name]

    def list(self):
        return sorted(self.records.values(), key=lambda r: r.date, reverse=True)

    def delete(self, name):
        if self.records.pop(name, None) is None:
            raise NotFoundError(name)


# --------------------------------------------------------------------- #
# Fixtures
# --------------------------------------------------------------------- #


@pytest.fixture
def now() -> datetime:
    return BASE_TIME


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec() -> SignedTokenCodec:
    return SignedTokenCodec()


@pytest.fixture
def signing_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


@pytest.fixture
def bucket(clock) -> FakeBucket:
    return FakeBucket(clock)


@pytest.fixture
def memory_repository(clock) -> InMemoryKeyRepository:
    return InMemoryKeyRepository(clock)
