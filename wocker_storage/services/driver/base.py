"""Abstract base class for container drivers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wocker_storage.services.capability import VolumeCapability


class DockerError(RuntimeError):
    """Raised when the container engine rejects or fails a command."""
    pass


@dataclass
class ContainerSpec:
    """Everything needed to create one container."""
    name: str
    image: str
    command: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    volumes: List[str] = field(default_factory=list)  # "source:target[:mode]"
    ports: List[str] = field(default_factory=list)  # "host:container"
    restart: Optional[str] = None


@dataclass
class ContainerInfo:
    """Runtime information about a container."""
    id: str
    name: str
    image: str
    status: str  # created, running, exited, ...

    @property
    def is_running(self) -> bool:
        return self.status == "running"


@dataclass
class ContainerState:
    """Result of inspecting a container."""
    running: bool
    status: str


class ContainerDriver(ABC):
    """Interface to the container engine used by the storage manager."""

    def __init__(self, mock: bool = False):
        """Initialize driver.

        Args:
            mock: If True, simulate operations without making real changes
        """
        self.mock = mock

    @abstractmethod
    def get_container(self, name: str) -> Optional[ContainerInfo]:
        """Return the container called name, or None if it does not exist."""
        pass

    @abstractmethod
    def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        """Create (but do not start) a container from spec.

        Raises:
            DockerError: If the engine fails to create it
        """
        pass

    @abstractmethod
    def remove_container(self, name: str) -> bool:
        """Force-remove a container.

        Returns:
            True if a container was removed, False if it did not exist
        """
        pass

    @abstractmethod
    def has_volume(self, name: str) -> bool:
        pass

    @abstractmethod
    def create_volume(self, name: str) -> None:
        pass

    @abstractmethod
    def remove_volume(self, name: str) -> None:
        pass

    @abstractmethod
    def inspect(self, name: str) -> ContainerState:
        """Return the running state of a container.

        Raises:
            DockerError: If the container does not exist
        """
        pass

    @abstractmethod
    def start(self, name: str) -> None:
        pass

    @abstractmethod
    def volume_capability(self) -> VolumeCapability:
        """Whether the engine is recent enough for named volume operations, and why not."""
        pass

    def supports_volumes(self) -> bool:
        return self.volume_capability().supported
