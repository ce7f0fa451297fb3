"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from approvalflow.core.config import AppSettings
from approvalflow.persistence.dynamodb_backend import DynamoDBStore
from approvalflow.persistence.redis_backend import RedisCacheBackend


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    Returns:
        Tuple of (store, cache). ``cache`` is None when Redis is disabled.
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

    store = DynamoDBStore(
        table_prefix=settings.dynamodb.table_prefix,
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    return store, cache
