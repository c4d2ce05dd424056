"""Container drivers."""
from wocker_storage.services.driver.base import (
    ContainerDriver,
    ContainerInfo,
    ContainerSpec,
    ContainerState,
    DockerError,
)
from wocker_storage.services.driver.docker import DockerDriver

__all__ = [
    'ContainerDriver',
    'ContainerInfo',
    'ContainerSpec',
    'ContainerState',
    'DockerError',
    'DockerDriver',
]
