from __future__ import annotations

import logging
from typing import Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud.storage import Blob, Bucket
from requests.exceptions import RequestException

from ...domain.constants import PEM_CONTENT_TYPE
from ...domain.entities import KeyRecord
from ...domain.exceptions import NotFoundError, StorageError
from ...domain.ports import KeyRepository
from ...domain.value_objects import KeyNamespace
from .pem import dump_private_key, load_private_key

logger = logging.getLogger(__name__)

# Transport failures surface from google-cloud-storage as requests errors.
_BACKEND_ERRORS = (GoogleAPIError, RequestException)


class GCSKeyRepository(KeyRepository):
    """
    Adapter implementing KeyRepository on a Google Cloud Storage bucket.

    Infrastructure layer:
    - One blob per record, named `<prefix>-<name>`.
    - Every call is bounded by `timeout` and issued without retries; retry
      policy belongs to the caller.
    """

    def __init__(self, bucket: Bucket, prefix: str, timeout: float = 30.0) -> None:
        self._bucket = bucket
        self._namespace = KeyNamespace(prefix)
        self._timeout = timeout

    @property
    def prefix(self) -> str:
        return self._namespace.prefix

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def write(self, key: Ed25519PrivateKey, name: str) -> KeyRecord:
        physical = self._namespace.physical(name)
        logical = self._namespace.logical(physical)
        data = dump_private_key(key, logical)

        blob = self._bucket.blob(physical)
        try:
            blob.upload_from_string(
                data,
                content_type=PEM_CONTENT_TYPE,
                timeout=self._timeout,
                retry=None,
            )
        except _BACKEND_ERRORS as exc:
            raise StorageError("write", logical, str(exc)) from exc

        logger.info("Uploaded key record %r (prefix=%s)", logical, self.prefix)
        return KeyRecord(key=key, name=logical, date=blob.updated)

    def read(self, name: str) -> KeyRecord:
        physical = self._namespace.physical(name)
        logical = self._namespace.logical(physical)

        try:
            blob: Optional[Blob] = self._bucket.get_blob(physical, timeout=self._timeout, retry=None)
        except _BACKEND_ERRORS as exc:
            raise StorageError("read", logical, str(exc)) from exc

        if blob is None:
            raise NotFoundError(logical)

        return self._load(blob)

    def list(self) -> list[KeyRecord]:
        records = []
        try:
            # The iterator pages through the bucket listing transparently.
            for blob in self._bucket.list_blobs(
                prefix=self._namespace.marker,
                timeout=self._timeout,
                retry=None,
            ):
                if self._namespace.owns(blob.name):
                    records.append(self._load(blob))
        except _BACKEND_ERRORS as exc:
            raise StorageError("list", self._bucket.name, str(exc)) from exc

        records.sort(key=lambda record: record.date, reverse=True)

        logger.debug("Listed %d key records (prefix=%s)", len(records), self.prefix)
        return records

    def delete(self, name: str) -> None:
        physical = self._namespace.physical(name)
        logical = self._namespace.logical(physical)

        try:
            self._bucket.delete_blob(physical, timeout=self._timeout, retry=None)
        except NotFound as exc:
            raise NotFoundError(logical) from exc
        except _BACKEND_ERRORS as exc:
            raise StorageError("delete", logical, str(exc)) from exc

        logger.info("Deleted key record %r (prefix=%s)", logical, self.prefix)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _load(self, blob: Blob) -> KeyRecord:
        logical = self._namespace.logical(blob.name)

        try:
            data = blob.download_as_bytes(timeout=self._timeout, retry=None)
        except NotFound as exc:
            raise NotFoundError(logical) from exc
        except _BACKEND_ERRORS as exc:
            raise StorageError("read", logical, str(exc)) from exc

        key = load_private_key(data, logical)
        return KeyRecord(key=key, name=logical, date=blob.updated)
