from __future__ import annotations

from typing import Optional

import redis

from ...domain.entities import TokenRecord
from ...domain.exceptions import StoreError
from ...domain.ports import TokenStore
from ...domain.value_objects import TokenId
from ...logging_config import get_logger
from ..serialization import FIELD_ACCESSED, record_from_fields, record_to_fields

logger = get_logger(__name__)

DEFAULT_NAMESPACE = "tokens"


class RedisTokenStore(TokenStore):
    """
    Adapter implementing the TokenStore port on Redis.

    Each token is one hash at `<namespace>:<uuid>` holding the persisted
    fields; the key TTL is the store-level retention. Writes go through a
    MULTI/EXEC pipeline so the fields and the TTL change together.

    `set_accessed` WATCHes the key and skips the write when the key is gone,
    so an expired or evicted token never comes back as a partial hash. A
    concurrent write to the key between the check and EXEC aborts the
    transaction (WatchError, reported as StoreError).
    """

    def __init__(self, client: redis.Redis, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = DEFAULT_NAMESPACE) -> RedisTokenStore:
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(client, namespace=namespace)

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def put(self, token_id: TokenId, record: TokenRecord, ttl_seconds: int) -> None:
        key = self._key(token_id)
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.hset(key, mapping=record_to_fields(record))
            pipe.expire(key, ttl_seconds)
            pipe.execute()
        except redis.RedisError as exc:
            logger.error("token_store_write_failed", token_id=str(token_id), error=str(exc))
            raise StoreError(f"Failed to store token record: {exc}") from exc

    def get(self, token_id: TokenId) -> Optional[TokenRecord]:
        try:
            fields = self._client.hgetall(self._key(token_id))
        except redis.RedisError as exc:
            logger.error("token_store_read_failed", token_id=str(token_id), error=str(exc))
            raise StoreError(f"Failed to read token record: {exc}") from exc

        if not fields:
            return None
        return record_from_fields(fields)

    def set_accessed(self, token_id: TokenId, accessed_ms: int, ttl_seconds: int) -> None:
        key = self._key(token_id)
        try:
            with self._client.pipeline() as pipe:
                pipe.watch(key)
                if not pipe.exists(key):
                    return
                pipe.multi()
                pipe.hset(key, FIELD_ACCESSED, str(accessed_ms))
                pipe.expire(key, ttl_seconds)
                pipe.execute()
        except redis.RedisError as exc:
            logger.error("token_store_write_failed", token_id=str(token_id), error=str(exc))
            raise StoreError(f"Failed to update token access time: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _key(self, token_id: TokenId) -> str:
        return f"{self._namespace}:{token_id.canonical}"
