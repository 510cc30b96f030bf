"""Pluggable learning-cache backends behind Protocol interfaces."""

from __future__ import annotations

from skumapper.core.config import AppSettings
from skumapper.persistence.dynamodb_backend import DynamoDBLearningStore
from skumapper.persistence.memory_backend import MemoryLearningStore
from skumapper.persistence.redis_backend import RedisCacheBackend


def create_persistence(settings: AppSettings | None = None):
    """Create the wired-up learning store from application settings.

    Returns:
        Tuple of (learning_store, cache). ``cache`` is None when Redis is disabled.
    """
    if settings is None:
        settings = AppSettings()

    cache = None
    if settings.redis.enabled:
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    if settings.learning_store == "memory":
        return MemoryLearningStore(), cache

    learning_store = DynamoDBLearningStore(
        table_name=settings.dynamodb.table_name,
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
        cache=cache,
        cache_ttl=settings.redis.ttl_seconds,
    )
    return learning_store, cache
