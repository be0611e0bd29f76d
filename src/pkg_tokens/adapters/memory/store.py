from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

from ...domain.entities import TokenRecord
from ...domain.ports import Clock, TokenStore
from ...domain.value_objects import TokenId
from ...utils.time import utc_now_ms
from ..serialization import FIELD_ACCESSED, record_from_fields, record_to_fields

# Expired records are swept from `put` at most this often.
PURGE_INTERVAL_MS = 60_000


class InMemoryTokenStore(TokenStore):
    """
    Process-local TokenStore with per-record TTL.

    Keeps the same flat field mapping the Redis adapter writes, so records
    round-trip through the persisted-field contract in tests too.
    Intended for tests and single-process deployments.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now_ms
        self._records: Dict[TokenId, Tuple[Dict[str, str], int]] = {}
        self._lock = threading.Lock()
        self._next_purge = 0

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def put(self, token_id: TokenId, record: TokenRecord, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            if now >= self._next_purge:
                self._purge_expired()
                self._next_purge = now + PURGE_INTERVAL_MS
            self._records[token_id] = (record_to_fields(record), self._expiry(ttl_seconds))

    def get(self, token_id: TokenId) -> Optional[TokenRecord]:
        with self._lock:
            fields = self._live_fields(token_id)
            if fields is None:
                return None
            return record_from_fields(dict(fields))

    def set_accessed(self, token_id: TokenId, accessed_ms: int, ttl_seconds: int) -> None:
        with self._lock:
            fields = self._live_fields(token_id)
            if fields is None:
                return
            fields[FIELD_ACCESSED] = str(accessed_ms)
            self._records[token_id] = (fields, self._expiry(ttl_seconds))

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def delete(self, token_id: TokenId) -> None:
        with self._lock:
            self._records.pop(token_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._records)

    def _expiry(self, ttl_seconds: int) -> int:
        return self._clock() + ttl_seconds * 1000

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._records.items() if now >= expires_at]
        for key in expired:
            del self._records[key]

    def _live_fields(self, token_id: TokenId) -> Optional[Dict[str, str]]:
        entry = self._records.get(token_id)
        if entry is None:
            return None
        fields, expires_at = entry
        if self._clock() >= expires_at:
            del self._records[token_id]
            return None
        return fields
