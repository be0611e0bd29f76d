from __future__ import annotations

from typing import Callable, Optional, Protocol

from .entities import TokenRecord
from .value_objects import TokenId

# Returns the current time in epoch milliseconds
Clock = Callable[[], int]


class TokenStore(Protocol):
    """
    Port for the key-value store that keeps token records.

    Implementations live in the adapters layer (in-memory, Redis).
    Every method raises StoreError on I/O failure.
    """

    def put(self, token_id: TokenId, record: TokenRecord, ttl_seconds: int) -> None:
        """Upsert the record and reset its TTL."""
        ...

    def get(self, token_id: TokenId) -> Optional[TokenRecord]:
        """Return the record, or None if absent or expired in the store."""
        ...

    def set_accessed(self, token_id: TokenId, accessed_ms: int, ttl_seconds: int) -> None:
        """Update only the `accessed` field, refreshing the TTL like `put`."""
        ...
