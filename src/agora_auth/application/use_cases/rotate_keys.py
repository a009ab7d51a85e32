from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional
from uuid import UUID, uuid4

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from ...domain.constants import MAX_BACKUPS, MIN_BACKUPS
from ...domain.entities import KeyRecord
from ...domain.exceptions import InvalidEntityError
from ...domain.ports import KeyRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RotateSigningKeysUseCase:
    """
    Application use case:
    - Write a new signing key under a fresh identifier
    - Keep at most `max_backups` records, dropping the oldest ones

    Tokens signed with a pruned key stop validating once the key caches
    have been refreshed.
    """

    repository: KeyRepository
    max_backups: int
    key_factory: Callable[[], Ed25519PrivateKey] = field(default=Ed25519PrivateKey.generate)
    id_factory: Callable[[], UUID] = field(default=uuid4)

    def __post_init__(self) -> None:
        if not MIN_BACKUPS <= self.max_backups <= MAX_BACKUPS:
            raise InvalidEntityError(
                "max_backups",
                f"value must be between {MIN_BACKUPS} and {MAX_BACKUPS}, got {self.max_backups}",
            )

    def execute(self, key: Optional[Ed25519PrivateKey] = None) -> KeyRecord:
        """
        Raises:
            NotFoundError if a record vanished while pruning
            StorageError
        """
        if key is None:
            key = self.key_factory()

        record = self.repository.write(key, str(self.id_factory()))

        records = self.repository.list()
        for extra in records[self.max_backups:]:
            self.repository.delete(extra.name)

        logger.info(
            "Rotated signing key to %r, pruned %d records",
            record.name,
            max(len(records) - self.max_backups, 0),
        )
        return record
