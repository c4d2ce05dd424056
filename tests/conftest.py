"""Shared test fixtures for wocker-storage tests."""
from typing import Any, Dict, List, Optional, Tuple

import pytest

from wocker_storage.core.config_store import ConfigStore, InMemoryPersistence
from wocker_storage.core.lifecycle import StorageManager
from wocker_storage.core.prompts import Prompter
from wocker_storage.services.capability import VolumeCapability
from wocker_storage.services.driver.base import (
    ContainerDriver,
    ContainerInfo,
    ContainerSpec,
    ContainerState,
    DockerError,
)


class FakeDriver(ContainerDriver):
    """In-memory driver that records every call."""

    def __init__(self, volumes_supported: bool = True):
        super().__init__(mock=True)
        self.volumes_supported = volumes_supported
        self.capability: Optional[VolumeCapability] = None
        self.containers: Dict[str, ContainerInfo] = {}
        self.specs: Dict[str, ContainerSpec] = {}
        self.volumes = set()
        self.calls: List[Tuple[str, Any]] = []

    def calls_to(self, method: str) -> List[Any]:
        return [arg for name, arg in self.calls if name == method]

    def get_container(self, name: str) -> Optional[ContainerInfo]:
        self.calls.append(("get_container", name))
        return self.containers.get(name)

    def create_container(self, spec: ContainerSpec) -> ContainerInfo:
        self.calls.append(("create_container", spec))
        info = ContainerInfo(id=f"id-{spec.name}", name=spec.name, image=spec.image, status="created")
        self.containers[spec.name] = info
        self.specs[spec.name] = spec
        return info

    def remove_container(self, name: str) -> bool:
        self.calls.append(("remove_container", name))
        return self.containers.pop(name, None) is not None

    def has_volume(self, name: str) -> bool:
        self.calls.append(("has_volume", name))
        return name in self.volumes

    def create_volume(self, name: str) -> None:
        self.calls.append(("create_volume", name))
        self.volumes.add(name)

    def remove_volume(self, name: str) -> None:
        self.calls.append(("remove_volume", name))
        self.volumes.discard(name)

    def inspect(self, name: str) -> ContainerState:
        self.calls.append(("inspect", name))
        info = self.containers.get(name)
        if info is None:
            raise DockerError(f"Container {name} not found")
        return ContainerState(running=info.is_running, status=info.status)

    def start(self, name: str) -> None:
        self.calls.append(("start", name))
        self.containers[name].status = "running"

    def volume_capability(self) -> VolumeCapability:
        self.calls.append(("volume_capability", None))
        if self.capability is not None:
            return self.capability
        if self.volumes_supported:
            return VolumeCapability(True, "docker API 1.43", api_version="1.43")
        return VolumeCapability(
            False,
            "docker API 1.24 is older than 1.25",
            api_version="1.24",
            hint="Please update Docker to API version 1.25 or newer.",
        )


class ScriptedPrompter(Prompter):
    """Answers prompts from a queue and records the questions asked."""

    def __init__(self, answers: Optional[List[Any]] = None):
        self.answers = list(answers or [])
        self.asked: List[str] = []
        self.rejected: List[str] = []

    def _next(self, message: str) -> Any:
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    def ask_text(self, message, validator=None, default=None, hide_input=False):
        while True:
            value = self._next(message)
            error = validator(value) if validator else None
            if error is None:
                return value
            self.rejected.append(error)

    def ask_select(self, message, options):
        return self._next(message)

    def ask_confirm(self, message, default=False):
        return self._next(message)


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def persistence():
    """Persisted document with no storages at all."""
    return InMemoryPersistence({"storages": []})


@pytest.fixture
def store(persistence):
    return ConfigStore(persistence)


@pytest.fixture
def prompter():
    return ScriptedPrompter()


@pytest.fixture
def manager(store, driver, prompter):
    return StorageManager(store, driver, prompter=prompter)


@pytest.fixture
def minio_props():
    return {
        'name': 's1',
        'type': 'minio',
        'username': 'abc',
        'password': 'longpass1',
    }


@pytest.fixture
def make_prompter():
    """Factory for prompters answering from a list."""
    return ScriptedPrompter
