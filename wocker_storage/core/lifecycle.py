"""Storage lifecycle: create, start, stop, destroy, upgrade and select storages.

Every operation reads the config store, asks the prompter for anything
missing, performs container work through the driver and saves the store
only after all checks have passed.
"""
from dataclasses import dataclass, replace
from typing import List, Optional

from wocker_storage.core.config_store import ConfigStore
from wocker_storage.core.errors import (
    AbortedError,
    AlreadyExistsError,
    ForbiddenError,
    UnsupportedError,
    ValidationError,
)
from wocker_storage.core.logger import get_logger
from wocker_storage.core.prompts import Prompter
from wocker_storage.engines import ENGINES, get_engine
from wocker_storage.models.storage import (
    Storage,
    StorageType,
    parse_storage_type,
    validate_storage_name,
)
from wocker_storage.services.driver.base import ContainerDriver
from wocker_storage.services.proxy import ReverseProxy

logger = get_logger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8


@dataclass
class StorageRow:
    """One line of the storage listing."""
    name: str
    type: str
    container_name: str
    is_default: bool


def validate_username(value: str) -> Optional[str]:
    if len(value or "") < MIN_USERNAME_LENGTH:
        return f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
    return None


def validate_password(value: str) -> Optional[str]:
    if len(value or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return None


class StorageManager:
    """Reconciles configured storages with containers and volumes."""

    def __init__(
        self,
        store: ConfigStore,
        driver: ContainerDriver,
        prompter: Optional[Prompter] = None,
        proxy: Optional[ReverseProxy] = None,
    ):
        """Initialize manager.

        Args:
            store: Config store holding all storages
            driver: Container engine access
            prompter: Interactive input; without one, missing fields are errors
            proxy: Reverse proxy refreshed after a storage container starts
        """
        self.store = store
        self.driver = driver
        self.prompter = prompter
        self.proxy = proxy

    def _require_prompter(self, what: str) -> Prompter:
        if self.prompter is None:
            raise ValidationError(f"{what} is required")
        return self.prompter

    def _validate_new_name(self, value: str) -> Optional[str]:
        try:
            validate_storage_name(value)
        except ValidationError as e:
            return str(e)
        if self.store.has(value):
            return f"Storage {value} already exists"
        return None

    def _resolve_type(self, storage_type) -> StorageType:
        if storage_type:
            try:
                return parse_storage_type(storage_type)
            except ValidationError:
                if self.prompter is None:
                    raise
                logger.warning(f"Unknown storage type '{storage_type}'")

        prompter = self._require_prompter("Storage type")
        options = [(engine.label, engine.type) for engine in ENGINES.values()]
        return parse_storage_type(prompter.ask_select("Storage type:", options))

    def _fill_credentials(
        self,
        storage: Storage,
        username: Optional[str],
        password: Optional[str],
    ) -> None:
        """Set credentials, prompting for the ones not given.

        Explicit values are taken as-is; only prompted values are checked
        for length.
        """
        if not username:
            username = self._require_prompter("Username").ask_text(
                "Username:", validator=validate_username
            )

        if not password:
            prompter = self._require_prompter("Password")
            password = prompter.ask_text(
                "Password:", validator=validate_password, hide_input=True
            )
            confirmation = prompter.ask_text("Confirm password:", hide_input=True)
            if confirmation != password:
                raise ValidationError("Passwords do not match")

        storage.username = username
        storage.password = password

    def create(
        self,
        name: Optional[str] = None,
        type: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        image_name: Optional[str] = None,
        image_version: Optional[str] = None,
    ) -> Storage:
        """Add a storage to the config; no container is touched.

        A name passed explicitly must be free. A prompted name is re-asked
        until it is free.

        Raises:
            AlreadyExistsError: If name is given and already configured
            ValidationError: On invalid input, mismatched passwords, or a
                missing field with no prompter to ask
        """
        if name:
            validate_storage_name(name)
            if self.store.has(name):
                raise AlreadyExistsError(f"Storage {name} already exists")
        else:
            name = self._require_prompter("Storage name").ask_text(
                "Storage name:", validator=self._validate_new_name
            )

        storage = Storage(name=name, type=self._resolve_type(type))

        if get_engine(storage.type).requires_credentials:
            self._fill_credentials(storage, username, password)
        else:
            storage.username = username
            storage.password = password

        if image_name:
            storage.set_image_name(image_name)
        if image_version:
            storage.set_image_version(image_version)

        self.store.upsert(storage)
        self.store.save()

        logger.info(f"Storage {storage.name} ({storage.type.value}) created")
        return storage

    def upgrade(
        self,
        name: Optional[str] = None,
        volume: Optional[str] = None,
        image: Optional[str] = None,
        image_name: Optional[str] = None,
        image_version: Optional[str] = None,
    ) -> bool:
        """Change volume or image settings of a storage.

        The running container keeps its old settings until started with
        ``restart=True``.

        Returns:
            True if the storage changed and was saved, False otherwise
        """
        storage = self.store.get_or_default(name)
        updated = replace(storage)

        if image:
            updated.set_image(image)
        if image_name:
            updated.set_image_name(image_name)
        if image_version:
            updated.set_image_version(image_version)
        if volume:
            updated.set_volume(volume)

        if updated.to_object() == storage.to_object():
            logger.info(f"Storage {storage.name} is up to date")
            return False

        self.store.upsert(updated)
        self.store.save()

        logger.info(f"Storage {storage.name} updated, restart it to apply changes")
        return True

    def destroy(self, name: str, yes: bool = False, force: bool = False) -> None:
        """Remove a storage, its container and its default volume.

        Raises:
            NotFoundError: If name is not configured
            ForbiddenError: If name is the default storage and force is False
            AbortedError: If the confirmation is declined
        """
        storage = self.store.get_by_name(name)

        if self.store.default_name == storage.name and not force:
            raise ForbiddenError(f"Cannot destroy default storage {name} without --force")

        if not yes:
            confirmed = self.prompter is not None and self.prompter.ask_confirm(
                f"Are you sure you want to delete the {name} storage? "
                "This action cannot be undone and all data will be lost.",
                default=False,
            )
            if not confirmed:
                raise AbortedError("Aborted")

        get_engine(storage.type).on_destroy(storage, self.driver)

        self.store.remove(storage.name)
        self.store.save()

        logger.info(f"Storage {storage.name} destroyed")

    def start(self, name: Optional[str] = None, restart: bool = False) -> bool:
        """Start the storage container, creating volume and container as needed.

        Returns:
            True if a container was started, False if it was already running
            or the storage type runs no container

        Raises:
            UnsupportedError: If the driver cannot manage volumes
        """
        if not name and not self.store.has_default():
            self.create()

        storage = self.store.get_or_default(name)

        capability = self.driver.volume_capability()
        if not capability.supported:
            message = f"Container engine does not support volume operations ({capability.reason})"
            if capability.hint:
                message = f"{message}. {capability.hint}"
            raise UnsupportedError(message)

        engine = get_engine(storage.type)

        if engine.requires_credentials and not (storage.username and storage.password):
            logger.info(f"Storage {storage.name} has no credentials yet")
            self._fill_credentials(storage, storage.username, storage.password)
            self.store.upsert(storage)
            self.store.save()

        if not self.driver.has_volume(storage.volume_name):
            self.driver.create_volume(storage.volume_name)

        spec = engine.launch_spec(storage)
        if spec is None:
            logger.info(f"Storage {storage.name} ({storage.type.value}) has no container to start")
            return False

        if restart:
            self.driver.remove_container(spec.name)

        if self.driver.get_container(spec.name) is None:
            self.driver.create_container(spec)

        if self.driver.inspect(spec.name).running:
            logger.info(f"Storage {storage.name} is already running")
            return False

        self.driver.start(spec.name)

        if self.proxy is not None:
            self.proxy.start()

        logger.info(f"Storage {storage.name} started at {storage.container_name}")
        return True

    def stop(self, name: Optional[str] = None) -> Storage:
        storage = self.store.get_or_default(name)
        get_engine(storage.type).on_stop(storage, self.driver)
        return storage

    def use(self, name: str) -> Storage:
        """Make name the default storage."""
        storage = self.store.get_by_name(name)
        self.store.set_default(storage.name)
        self.store.save()

        logger.info(f"Default storage set to {storage.name}")
        return storage

    def list(self) -> List[StorageRow]:
        default = self.store.default_name
        return [
            StorageRow(
                name=storage.name,
                type=storage.type.value,
                container_name=storage.container_name,
                is_default=storage.name == default,
            )
            for storage in self.store.storages()
        ]
