"""Data models for wocker-storage."""
from wocker_storage.models.document import ConfigDocumentModel, StorageRecord
from wocker_storage.models.storage import (
    DEFAULT_IMAGES,
    Storage,
    StorageType,
    default_volume_name,
    parse_storage_type,
    validate_storage_name,
)

__all__ = [
    'ConfigDocumentModel',
    'StorageRecord',
    'DEFAULT_IMAGES',
    'Storage',
    'StorageType',
    'default_volume_name',
    'parse_storage_type',
    'validate_storage_name',
]
