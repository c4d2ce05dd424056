"""Redis cache engine.

Redis storages are configuration-only for now: nothing is launched, so stop
and destroy have no container work to do.
"""
from typing import Optional

from wocker_storage.core.logger import get_logger
from wocker_storage.engines.base import StorageEngine
from wocker_storage.models.storage import Storage, StorageType
from wocker_storage.services.driver.base import ContainerDriver, ContainerSpec

logger = get_logger(__name__)


class RedisEngine(StorageEngine):
    type = StorageType.REDIS
    label = "Redis"

    def launch_spec(self, storage: Storage) -> Optional[ContainerSpec]:
        return None

    def on_stop(self, storage: Storage, driver: ContainerDriver) -> None:
        logger.debug(f"Nothing to stop for redis storage {storage.name}")

    def on_destroy(self, storage: Storage, driver: ContainerDriver) -> None:
        logger.debug(f"Nothing to clean up for redis storage {storage.name}")
