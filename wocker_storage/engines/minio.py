"""MinIO object storage engine."""
import shlex
from typing import Optional

from wocker_storage.core.errors import ValidationError
from wocker_storage.core.logger import get_logger
from wocker_storage.engines.base import StorageEngine
from wocker_storage.models.storage import Storage, StorageType
from wocker_storage.services.driver.base import ContainerDriver, ContainerSpec

logger = get_logger(__name__)

MINIO_COMMAND = "server /data --address :80 --console-address :9000"
MINIO_CONSOLE_PORT = "9000"


class MinioEngine(StorageEngine):
    type = StorageType.MINIO
    label = "Minio"
    requires_credentials = True

    def launch_spec(self, storage: Storage) -> Optional[ContainerSpec]:
        if not storage.username or not storage.password:
            raise ValidationError(f"Storage {storage.name} has no credentials")

        return ContainerSpec(
            name=storage.container_name,
            image=storage.image_tag,
            command=shlex.split(MINIO_COMMAND),
            env={
                "VIRTUAL_HOST": storage.container_name,
                "VIRTUAL_PORT": MINIO_CONSOLE_PORT,
                "MINIO_ROOT_USER": storage.username,
                "MINIO_ROOT_PASSWORD": storage.password,
            },
            volumes=[f"{storage.volume_name}:/data"],
        )

    def on_stop(self, storage: Storage, driver: ContainerDriver) -> None:
        if driver.remove_container(storage.container_name):
            logger.info(f"Stopped {storage.name} ({storage.container_name})")
        else:
            logger.info(f"Storage {storage.name} is not running")

    def on_destroy(self, storage: Storage, driver: ContainerDriver) -> None:
        driver.remove_container(storage.container_name)

        if storage.has_custom_volume:
            logger.warning(
                f"Volume {storage.volume_name} is a custom volume and was kept; "
                "remove it manually if it is no longer needed"
            )
            return

        if not driver.supports_volumes():
            logger.warning(f"Volume {storage.volume_name} was kept: volume operations unsupported")
            return

        if driver.has_volume(storage.volume_name):
            driver.remove_volume(storage.volume_name)
