"""Abstract base class for storage engines (MinIO, Redis, ...)."""
from abc import ABC, abstractmethod
from typing import Optional

from wocker_storage.models.storage import Storage, StorageType
from wocker_storage.services.driver.base import ContainerDriver, ContainerSpec


class StorageEngine(ABC):
    """Per-type behaviour of a storage: how it launches, stops and is destroyed."""

    type: StorageType
    label: str
    requires_credentials: bool = False

    @abstractmethod
    def launch_spec(self, storage: Storage) -> Optional[ContainerSpec]:
        """Container to run for storage, or None if the type runs nothing."""
        pass

    @abstractmethod
    def on_stop(self, storage: Storage, driver: ContainerDriver) -> None:
        pass

    @abstractmethod
    def on_destroy(self, storage: Storage, driver: ContainerDriver) -> None:
        """Release engine resources before storage leaves the config."""
        pass
