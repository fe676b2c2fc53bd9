"""Redis-backed document storage.

Each document is a JSON string under ``{prefix}{collection}:{id}``; the
insertion order of a collection is kept in the list ``{prefix}{collection}:ids``.

For Cloud Run with Memorystore:
- Set REDIS_HOST to the Memorystore instance IP
- Set REDIS_PASSWORD if authentication is enabled
- Ensure VPC connector is configured for Cloud Run
"""
import json
import redis
from contextlib import contextmanager
from typing import List, Optional, Tuple

from pathways.core.config import settings
from pathways.core.errors import ConnectivityError
from pathways.core.logging import get_logger
from pathways.infrastructure.store import Document, DocumentStore

logger = get_logger(__name__)

# Redis connection pool (lazy initialization)
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
) -> Optional[redis.Redis]:
    """Get or create a pooled Redis client.

    Uses settings from environment variables if not explicitly provided.
    Returns None if Redis is not reachable so callers can fall back to the
    in-memory store.

    Args:
        host: Redis host (default from REDIS_HOST env)
        port: Redis port (default from REDIS_PORT env)
        db: Redis database number (default from REDIS_DB env)
        password: Redis password (default from REDIS_PASSWORD env)

    Returns:
        Redis client instance or None if unavailable
    """
    global _redis_pool, _redis_client

    host = host or settings.redis_host
    port = port or settings.redis_port
    db = db if db is not None else settings.redis_db
    password = password or settings.redis_password

    if _redis_client is None:
        logger.info(f"Initializing Redis connection pool: {host}:{port}")

        try:
            _redis_pool = redis.ConnectionPool(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=True,
                max_connections=50,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            _redis_client = redis.Redis(connection_pool=_redis_pool)
            _redis_client.ping()
            logger.info("Redis connection established successfully")

        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            _redis_client = None
            return None

    return _redis_client


class RedisDocumentStore(DocumentStore):
    """Document store on top of plain Redis strings and lists.

    Example:
        >>> store = RedisDocumentStore(get_redis_client())
        >>> doc_id = store.add("students", {"name": "Maya Chen"})
        >>> store.list("students")
        [('3f2b...', {'name': 'Maya Chen'})]
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: Optional[str] = None):
        self.redis = redis_client
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix
        logger.info(f"RedisDocumentStore initialized with prefix '{self.key_prefix}'")

    def _doc_key(self, collection: str, doc_id: str) -> str:
        return f"{self.key_prefix}{collection}:{doc_id}"

    def _ids_key(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}:ids"

    @contextmanager
    def _connectivity(self, operation: str, collection: str):
        try:
            yield
        except redis.RedisError as e:
            logger.error(
                f"Redis {operation} failed: {e}",
                extra={"operation": operation, "collection": collection},
                exc_info=True
            )
            raise ConnectivityError(f"Document store unavailable: {e}", service="store") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._connectivity("get", collection):
            data = self.redis.get(self._doc_key(collection, doc_id))
        return json.loads(data) if data else None

    def set(self, collection: str, doc_id: str, doc: Document, ttl_seconds: Optional[int] = None) -> None:
        key = self._doc_key(collection, doc_id)
        serialized = json.dumps(doc, default=str)
        with self._connectivity("set", collection):
            existed = bool(self.redis.exists(key))
            if ttl_seconds:
                self.redis.setex(key, ttl_seconds, serialized)
            else:
                self.redis.set(key, serialized)
            if not existed:
                # an expired document may have left its id in the list
                self.redis.lrem(self._ids_key(collection), 0, doc_id)
                self.redis.rpush(self._ids_key(collection), doc_id)
        logger.debug(f"Document saved: {key}")

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._connectivity("delete", collection):
            deleted = self.redis.delete(self._doc_key(collection, doc_id))
            self.redis.lrem(self._ids_key(collection), 0, doc_id)
        return bool(deleted)

    def list(self, collection: str) -> List[Tuple[str, Document]]:
        with self._connectivity("list", collection):
            ids = self.redis.lrange(self._ids_key(collection), 0, -1)
            if not ids:
                return []
            values = self.redis.mget([self._doc_key(collection, doc_id) for doc_id in ids])

        # expired documents leave their id behind; skip them
        return [(doc_id, json.loads(value)) for doc_id, value in zip(ids, values) if value]
