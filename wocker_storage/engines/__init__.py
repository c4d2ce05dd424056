"""Storage engines keyed by storage type."""
from typing import Dict

from wocker_storage.engines.base import StorageEngine
from wocker_storage.engines.minio import MinioEngine
from wocker_storage.engines.redis import RedisEngine
from wocker_storage.models.storage import StorageType, parse_storage_type

ENGINES: Dict[StorageType, StorageEngine] = {
    StorageType.MINIO: MinioEngine(),
    StorageType.REDIS: RedisEngine(),
}


def get_engine(storage_type) -> StorageEngine:
    """Return the engine for a StorageType or its string value."""
    return ENGINES[parse_storage_type(storage_type)]


__all__ = ['ENGINES', 'StorageEngine', 'MinioEngine', 'RedisEngine', 'get_engine']
