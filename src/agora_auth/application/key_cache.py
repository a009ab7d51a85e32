from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ..domain.entities import KeyRecord
from ..domain.ports import KeyRepository

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SigningKeyCache:
    """
    In-memory view of the repository listing.

    - the most recent record signs new tokens
    - every listed record is trusted for verification, so tokens signed
      before a rotation stay valid while their key is still stored
    - the listing is re-read at most once per `update_interval`
    """

    def __init__(
        self,
        repository: KeyRepository,
        update_interval: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._update_interval = update_interval
        self._clock = clock

        self._records: List[KeyRecord] = []
        self._last_updated: Optional[datetime] = None
        self._lock = threading.Lock()

    def refresh(self) -> None:
        records = self._repository.list()
        with self._lock:
            self._records = records
        logger.debug("Signing key cache holds %d keys", len(records))

    def refresh_if_stale(self) -> bool:
        """
        Refresh the cache when the last refresh is older than the update interval.

        Returns True when the repository was read. A failed refresh leaves the
        previous state in place so the next call tries again.
        """
        now = self._clock()
        with self._lock:
            last = self._last_updated
            if last is not None and now - last < self._update_interval:
                return False
            self._last_updated = now

        try:
            self.refresh()
        except Exception:
            with self._lock:
                self._last_updated = last
            raise

        return True

    def private_key(self) -> Optional[Ed25519PrivateKey]:
        with self._lock:
            if not self._records:
                return None
            return self._records[0].key

    def public_keys(self) -> List[Ed25519PublicKey]:
        with self._lock:
            return [record.public_key for record in self._records]
