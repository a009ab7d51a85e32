from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ...domain.entities import KeyRecord
from ...domain.exceptions import NotFoundError, StorageError
from ...domain.ports import KeyRepository
from ...domain.value_objects import KeyNamespace
from .pem import dump_private_key, load_private_key

logger = logging.getLogger(__name__)


def _modified_at(stat: os.stat_result) -> datetime:
    return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)


def _reason(exc: OSError) -> str:
    return exc.strerror or exc.__class__.__name__


class FileSystemKeyRepository(KeyRepository):
    """
    Adapter implementing KeyRepository on a local directory.

    One file per record, at `<base_path>/<prefix>-<name>`. The file's
    modification time is the record date. No handle or lock outlives a call;
    concurrent writes to the same name are last-writer-wins.
    """

    def __init__(self, base_path: str | os.PathLike[str], prefix: str) -> None:
        self._base_path = Path(base_path)
        self._namespace = KeyNamespace(prefix)

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def prefix(self) -> str:
        return self._namespace.prefix

    def _path(self, name: str) -> Path:
        return self._base_path / self._namespace.physical(name)

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def write(self, key: Ed25519PrivateKey, name: str) -> KeyRecord:
        path = self._path(name)
        logical = self._namespace.logical(path.name)
        data = dump_private_key(key, logical)

        try:
            with path.open("wb") as output:
                output.write(data)
            stat = path.stat()
        except OSError as exc:
            raise StorageError("write", logical, _reason(exc)) from exc

        logger.info("Wrote key record %r (prefix=%s)", logical, self.prefix)
        return KeyRecord(key=key, name=logical, date=_modified_at(stat))

    def read(self, name: str) -> KeyRecord:
        path = self._path(name)
        logical = self._namespace.logical(path.name)

        try:
            data = path.read_bytes()
            stat = path.stat()
        except FileNotFoundError as exc:
            raise NotFoundError(logical) from exc
        except OSError as exc:
            raise StorageError("read", logical, _reason(exc)) from exc

        key = load_private_key(data, logical)
        return KeyRecord(key=key, name=logical, date=_modified_at(stat))

    def list(self) -> list[KeyRecord]:
        try:
            with os.scandir(self._base_path) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if entry.is_file() and self._namespace.owns(entry.name)
                ]
        except FileNotFoundError:
            logger.debug("Key directory %s does not exist yet", self._base_path)
            return []
        except OSError as exc:
            raise StorageError("list", str(self._base_path), _reason(exc)) from exc

        # A record failing to load fails the whole listing.
        records = [self.read(name) for name in names]
        records.sort(key=lambda record: record.date, reverse=True)

        logger.debug("Listed %d key records (prefix=%s)", len(records), self.prefix)
        return records

    def delete(self, name: str) -> None:
        path = self._path(name)
        logical = self._namespace.logical(path.name)

        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise NotFoundError(logical) from exc
        except OSError as exc:
            raise StorageError("delete", logical, _reason(exc)) from exc

        logger.info("Deleted key record %r (prefix=%s)", logical, self.prefix)
