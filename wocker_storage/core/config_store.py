"""Configuration document for all storages and its persistence.

The store keeps the document in memory; mutations stay local until
``save()`` hands the serialized document to the persistence strategy.
"""
import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError

from wocker_storage.core.errors import NotFoundError, PersistenceError
from wocker_storage.core.logger import get_logger
from wocker_storage.models.document import ConfigDocumentModel
from wocker_storage.models.storage import Storage, StorageType

logger = get_logger(__name__)

DEFAULT_STORAGE_NAME = "default"


class ConfigPersistence(ABC):
    """Where the raw document lives."""

    @abstractmethod
    def read(self) -> Optional[Dict[str, Any]]:
        """Return the raw document, or None if nothing was persisted yet.

        Raises:
            PersistenceError: If the document exists but cannot be read
        """
        pass

    @abstractmethod
    def write(self, data: Dict[str, Any]) -> None:
        """Replace the persisted document with data.

        Raises:
            PersistenceError: If the document cannot be written
        """
        pass


class JsonFilePersistence(ConfigPersistence):
    """JSON file on disk, replaced atomically on every write."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Failed to read {self.path}: expected a JSON object")

        logger.debug(f"Loaded storage config from {self.path}")
        return data

    def write(self, data: Dict[str, Any]) -> None:
        temp_file = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            # Write to a sibling temp file, then rename over the target
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_file, self.path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

        logger.debug(f"Saved storage config to {self.path}")


class InMemoryPersistence(ConfigPersistence):
    """Keeps the document in a dict; used when embedding and in tests."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = data
        self.writes = 0

    def read(self) -> Optional[Dict[str, Any]]:
        if self.data is None:
            return None
        return json.loads(json.dumps(self.data))

    def write(self, data: Dict[str, Any]) -> None:
        self.data = json.loads(json.dumps(data))
        self.writes += 1


@dataclass
class ConfigDocument:
    """In-memory form of config.json."""
    default: Optional[str] = None
    storages: Dict[str, Storage] = field(default_factory=dict)

    def to_object(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.default is not None:
            data["default"] = self.default
        data["storages"] = [storage.to_object() for storage in self.storages.values()]
        return data

    @classmethod
    def from_object(cls, data: Dict[str, Any]) -> "ConfigDocument":
        """Validate a raw document and build entities from it.

        Raises:
            PersistenceError: If data does not match the document schema
        """
        try:
            model = ConfigDocumentModel.model_validate(data)
        except SchemaError as e:
            raise PersistenceError(f"Malformed storage config: {e}") from e

        storages: Dict[str, Storage] = {}
        for record in model.storages:
            raw = record.model_dump(by_alias=True, exclude_none=True)
            storages[record.name] = Storage.from_object(raw)

        return cls(default=model.default, storages=storages)

    @classmethod
    def initial(cls) -> "ConfigDocument":
        """Document used before anything was persisted: one MinIO storage."""
        storage = Storage(name=DEFAULT_STORAGE_NAME, type=StorageType.MINIO)
        return cls(default=storage.name, storages={storage.name: storage})


class ConfigStore:
    """Typed access to the storage document with name/default invariants."""

    def __init__(self, persistence: ConfigPersistence):
        self.persistence = persistence
        self._document: Optional[ConfigDocument] = None

    def load(self) -> ConfigDocument:
        """Return the document, reading it on first access.

        Raises:
            PersistenceError: If the persisted document is unreadable or malformed
        """
        if self._document is None:
            data = self.persistence.read()
            if data is None:
                logger.debug("No storage config persisted yet, using initial document")
                self._document = ConfigDocument.initial()
            else:
                self._document = ConfigDocument.from_object(data)
        return self._document

    @property
    def default_name(self) -> Optional[str]:
        return self.load().default

    def storages(self) -> List[Storage]:
        """All storages in insertion order."""
        return list(self.load().storages.values())

    def has(self, name: Optional[str]) -> bool:
        if not name:
            return False
        return name in self.load().storages

    def has_default(self) -> bool:
        """True when the default name points at an existing storage."""
        return self.has(self.default_name)

    def get_by_name(self, name: str) -> Storage:
        storage = self.load().storages.get(name)
        if storage is None:
            raise NotFoundError(f"Storage {name} not found")
        return storage

    def get_default(self) -> Storage:
        document = self.load()
        if not document.default:
            raise NotFoundError("Default storage is not defined")

        storage = document.storages.get(document.default)
        if storage is None:
            raise NotFoundError(f"Default storage {document.default} not found")
        return storage

    def get_or_default(self, name: Optional[str] = None) -> Storage:
        if name:
            return self.get_by_name(name)
        return self.get_default()

    def upsert(self, storage: Storage) -> None:
        """Insert or replace storage by name.

        A document without a (resolvable) default adopts the upserted storage
        as default.
        """
        document = self.load()
        document.storages[storage.name] = storage
        if not document.default or document.default not in document.storages:
            document.default = storage.name

    def remove(self, name: str) -> None:
        document = self.load()
        if name not in document.storages:
            raise NotFoundError(f"Storage {name} not found")

        del document.storages[name]
        if document.default == name:
            document.default = None

    def set_default(self, name: str) -> None:
        document = self.load()
        if name not in document.storages:
            raise NotFoundError(f"Storage {name} not found")
        document.default = name

    def save(self) -> None:
        """Persist the whole document.

        Raises:
            PersistenceError: If the persistence strategy fails to write
        """
        self.persistence.write(self.load().to_object())
