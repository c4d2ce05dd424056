"""Tests for StorageManager operations."""
from types import SimpleNamespace

import pytest

from wocker_storage.core.config_store import ConfigStore, InMemoryPersistence
from wocker_storage.core.errors import (
    AbortedError,
    AlreadyExistsError,
    ForbiddenError,
    NotFoundError,
    UnsupportedError,
    ValidationError,
)
from wocker_storage.core.lifecycle import StorageManager, StorageRow
from wocker_storage.models.storage import Storage, StorageType
from wocker_storage.services.capability import detect_volume_support


class TestCreate:
    """create()"""

    def test_create_then_get_by_name(self, manager, store, minio_props):
        manager.create(**minio_props)

        storage = store.get_by_name("s1")
        assert storage.name == "s1"
        assert storage.type is StorageType.MINIO
        assert storage.username == "abc"

    def test_first_storage_becomes_default(self, manager, store, minio_props):
        manager.create(**minio_props)
        manager.create(name="s2", type="redis")

        assert store.default_name == "s1"

    def test_create_persists_without_driver_calls(self, manager, persistence, driver, minio_props):
        manager.create(**minio_props)

        assert persistence.writes == 1
        assert persistence.data["storages"][0]["name"] == "s1"
        assert driver.calls == []

    def test_scenario_empty_config_lists_default_row(self, manager, minio_props):
        manager.create(**minio_props)

        assert manager.list() == [StorageRow("s1", "minio", "minio-s1.ws", True)]

    def test_explicit_duplicate_name_fails(self, manager, persistence, minio_props):
        manager.create(**minio_props)

        with pytest.raises(AlreadyExistsError, match="Storage s1 already exists"):
            manager.create(**minio_props)

        assert persistence.writes == 1

    def test_explicit_invalid_name_fails(self, manager):
        with pytest.raises(ValidationError):
            manager.create(name="bad name", type="redis")

    def test_prompted_duplicate_name_is_asked_again(self, store, driver, make_prompter):
        prompter = make_prompter(["s1", "s2", StorageType.REDIS])
        manager = StorageManager(store, driver, prompter=prompter)
        store.upsert(Storage(name="s1", type="minio"))

        storage = manager.create()

        assert storage.name == "s2"
        assert prompter.rejected == ["Storage s1 already exists"]

    def test_prompts_in_fixed_order(self, store, driver, make_prompter):
        prompter = make_prompter(["files", StorageType.MINIO, "admin", "longpass1", "longpass1"])
        manager = StorageManager(store, driver, prompter=prompter)

        storage = manager.create()

        assert prompter.asked == [
            "Storage name:",
            "Storage type:",
            "Username:",
            "Password:",
            "Confirm password:",
        ]
        assert storage.username == "admin"
        assert storage.password == "longpass1"

    def test_prompted_credentials_are_length_checked(self, store, driver, make_prompter):
        prompter = make_prompter(["ab", "admin", "short", "longpass1", "longpass1"])
        manager = StorageManager(store, driver, prompter=prompter)

        manager.create(name="files", type="minio")

        assert prompter.rejected == [
            "Username must be at least 3 characters long",
            "Password must be at least 8 characters long",
        ]

    def test_explicit_credentials_are_not_length_checked(self, manager, store):
        manager.create(name="files", type="minio", username="a", password="b")

        assert store.get_by_name("files").password == "b"

    def test_password_mismatch(self, store, driver, persistence, make_prompter):
        prompter = make_prompter(["longpass1", "longpass2"])
        manager = StorageManager(store, driver, prompter=prompter)

        with pytest.raises(ValidationError, match="Passwords do not match"):
            manager.create(name="files", type="minio", username="admin")

        assert persistence.writes == 0
        assert not store.has("files")

    def test_invalid_type_is_prompted(self, store, driver, make_prompter):
        prompter = make_prompter([StorageType.REDIS])
        manager = StorageManager(store, driver, prompter=prompter)

        storage = manager.create(name="cache", type="mysql")

        assert storage.type is StorageType.REDIS

    def test_redis_needs_no_credentials(self, manager, prompter):
        storage = manager.create(name="cache", type="redis")

        assert storage.username is None
        assert prompter.asked == []

    def test_missing_field_without_prompter(self, store, driver):
        manager = StorageManager(store, driver)

        with pytest.raises(ValidationError, match="Storage name is required"):
            manager.create(type="redis")

        with pytest.raises(ValidationError, match="Password is required"):
            manager.create(name="files", type="minio", username="admin")

    def test_image_overrides(self, manager):
        storage = manager.create(
            name="files", type="minio", username="abc", password="longpass1",
            image_name="quay.io/minio/minio", image_version="RELEASE.1",
        )

        assert storage.image_tag == "quay.io/minio/minio:RELEASE.1"


class TestUpgrade:
    """upgrade()"""

    @pytest.fixture(autouse=True)
    def _storage(self, store):
        store.upsert(Storage(name="files", type="minio", username="abc", password="longpass1"))

    def test_no_fields_is_a_noop(self, manager, persistence, driver):
        assert manager.upgrade("files") is False
        assert persistence.writes == 0
        assert driver.calls == []

    def test_same_values_is_a_noop(self, manager, persistence):
        assert manager.upgrade("files", image="minio/minio:latest") is True
        writes = persistence.writes

        assert manager.upgrade("files", image_version="latest") is False
        assert persistence.writes == writes

    def test_applies_fields_to_default_storage(self, manager, store, persistence, driver):
        assert manager.upgrade(volume="custom-data", image_version="RELEASE.2") is True

        storage = store.get_by_name("files")
        assert storage.volume == "custom-data"
        assert storage.image_tag == "minio/minio:RELEASE.2"
        assert persistence.data["storages"][0]["volume"] == "custom-data"
        assert driver.calls == []

    def test_invalid_image_leaves_storage_untouched(self, manager, store, persistence):
        with pytest.raises(ValidationError):
            manager.upgrade("files", image_name="quay.io/minio/minio", image_version="!bad")

        assert store.get_by_name("files").image_name is None
        assert persistence.writes == 0

    def test_unknown_storage(self, manager):
        with pytest.raises(NotFoundError):
            manager.upgrade("nope", volume="x1")


class TestDestroy:
    """destroy()"""

    @pytest.fixture(autouse=True)
    def _storages(self, store, driver):
        store.upsert(Storage(name="main", type="minio", username="abc", password="longpass1"))
        store.upsert(Storage(name="files", type="minio", username="abc", password="longpass1"))
        driver.volumes.update({"wocker-storage-minio-main", "wocker-storage-minio-files"})

    def test_default_without_force_is_forbidden(self, manager, store, prompter):
        with pytest.raises(ForbiddenError):
            manager.destroy("main", yes=True)

        assert store.has("main")
        assert prompter.asked == []

    def test_default_with_force_clears_default(self, manager, store, persistence):
        manager.destroy("main", yes=True, force=True)

        assert not store.has("main")
        assert store.default_name is None
        assert "default" not in persistence.data

    def test_declined_confirmation_aborts(self, manager, store, driver, prompter):
        prompter.answers = [False]

        with pytest.raises(AbortedError):
            manager.destroy("files")

        assert store.has("files")
        assert driver.calls == []

    def test_no_prompter_and_no_yes_aborts(self, store, driver):
        manager = StorageManager(store, driver)

        with pytest.raises(AbortedError):
            manager.destroy("files")

    def test_confirmed_destroy_removes_container_and_volume(self, manager, store, driver, prompter):
        prompter.answers = [True]
        manager.start("files")

        manager.destroy("files")

        assert not store.has("files")
        assert "minio-files.ws" not in driver.containers
        assert driver.calls_to("remove_volume") == ["wocker-storage-minio-files"]

    def test_missing_container_is_not_an_error(self, manager, store):
        manager.destroy("files", yes=True)

        assert not store.has("files")

    def test_custom_volume_is_never_removed(self, manager, store, driver, caplog):
        store.get_by_name("files").volume = "precious-data"
        driver.volumes.add("precious-data")

        manager.destroy("files", yes=True)

        assert driver.calls_to("remove_volume") == []
        assert "precious-data" in driver.volumes
        assert "Volume precious-data is a custom volume and was kept" in caplog.text

    def test_volume_kept_when_volumes_unsupported(self, manager, driver):
        driver.volumes_supported = False

        manager.destroy("files", yes=True)

        assert driver.calls_to("remove_volume") == []

    def test_redis_has_no_driver_actions(self, manager, store, driver):
        store.upsert(Storage(name="cache", type="redis"))

        manager.destroy("cache", yes=True)

        assert driver.calls == []
        assert not store.has("cache")

    def test_destroy_requires_existing_name(self, manager):
        with pytest.raises(NotFoundError):
            manager.destroy("nope", yes=True)


class TestStart:
    """start()"""

    @pytest.fixture(autouse=True)
    def _storage(self, manager, minio_props):
        manager.create(**minio_props)

    def test_creates_volume_then_container_and_starts(self, manager, driver):
        assert manager.start("s1") is True

        assert driver.calls_to("create_volume") == ["wocker-storage-minio-s1"]
        spec = driver.specs["minio-s1.ws"]
        assert spec.image == "minio/minio:latest"
        assert spec.command == ["server", "/data", "--address", ":80", "--console-address", ":9000"]
        assert spec.env == {
            "VIRTUAL_HOST": "minio-s1.ws",
            "VIRTUAL_PORT": "9000",
            "MINIO_ROOT_USER": "abc",
            "MINIO_ROOT_PASSWORD": "longpass1",
        }
        assert spec.volumes == ["wocker-storage-minio-s1:/data"]
        assert driver.calls_to("start") == ["minio-s1.ws"]

    def test_already_running_is_not_started_again(self, manager, driver):
        manager.start("s1")
        driver.calls.clear()

        assert manager.start("s1", restart=False) is False

        assert driver.calls_to("start") == []
        assert driver.calls_to("create_container") == []

    def test_restart_recreates_container(self, manager, driver):
        manager.start("s1")
        driver.calls.clear()

        assert manager.start("s1", restart=True) is True

        assert driver.calls_to("remove_container") == ["minio-s1.ws"]
        assert len(driver.calls_to("create_container")) == 1
        assert driver.calls_to("start") == ["minio-s1.ws"]

    def test_existing_volume_is_reused(self, manager, driver):
        driver.volumes.add("wocker-storage-minio-s1")

        manager.start("s1")

        assert driver.calls_to("create_volume") == []

    def test_upgraded_image_and_volume_apply_on_restart(self, manager, driver):
        manager.start("s1")
        manager.upgrade("s1", volume="other-data", image_version="RELEASE.3")

        manager.start("s1", restart=True)

        spec = driver.specs["minio-s1.ws"]
        assert spec.image == "minio/minio:RELEASE.3"
        assert spec.volumes == ["other-data:/data"]

    def test_unsupported_volumes(self, manager, driver):
        driver.volumes_supported = False

        with pytest.raises(UnsupportedError, match="older than 1.25. Please update Docker"):
            manager.start("s1")

        assert driver.calls_to("create_volume") == []

    def test_unavailable_server_version_is_reported(self, manager, driver):
        engine = SimpleNamespace(mock=False, api_version=lambda: None)
        driver.capability = detect_volume_support(engine)

        with pytest.raises(UnsupportedError) as exc_info:
            manager.start("s1")

        assert "docker server version unavailable" in str(exc_info.value)
        assert "Please update Docker to API version 1.25 or newer." in str(exc_info.value)
        assert driver.calls_to("create_container") == []

    def test_default_storage_used_without_name(self, manager, driver):
        manager.start()

        assert driver.calls_to("start") == ["minio-s1.ws"]

    def test_proxy_started_after_container(self, store, driver, minio_props):
        class Proxy:
            started = 0

            def start(self):
                Proxy.started += 1

        manager = StorageManager(store, driver, proxy=Proxy())

        manager.start("s1")
        manager.start("s1")

        assert Proxy.started == 1

    def test_redis_is_a_noop(self, manager, driver):
        manager.create(name="cache", type="redis")

        assert manager.start("cache") is False
        assert driver.calls_to("create_container") == []
        assert driver.calls_to("start") == []


class TestStartWithoutDefault:
    """start() on a document without a usable default."""

    def test_runs_create_first(self, driver, make_prompter):
        store = ConfigStore(InMemoryPersistence({"storages": []}))
        prompter = make_prompter(["files", StorageType.MINIO, "admin", "longpass1", "longpass1"])
        manager = StorageManager(store, driver, prompter=prompter)

        assert manager.start() is True

        assert store.default_name == "files"
        assert driver.calls_to("start") == ["minio-files.ws"]

    def test_materialized_default_gets_credentials(self, driver, make_prompter):
        persistence = InMemoryPersistence()
        store = ConfigStore(persistence)
        prompter = make_prompter(["admin", "longpass1", "longpass1"])
        manager = StorageManager(store, driver, prompter=prompter)

        manager.start()

        assert persistence.data["storages"][0]["username"] == "admin"
        assert driver.specs["minio-default.ws"].env["MINIO_ROOT_USER"] == "admin"


class TestStop:
    """stop()"""

    def test_stop_removes_container(self, manager, driver, minio_props):
        manager.create(**minio_props)
        manager.start()

        manager.stop()

        assert driver.calls_to("remove_container") == ["minio-s1.ws"]
        assert "minio-s1.ws" not in driver.containers

    def test_stop_is_idempotent(self, manager, driver, minio_props):
        manager.create(**minio_props)

        manager.stop("s1")
        manager.stop("s1")

        assert driver.calls_to("remove_container") == ["minio-s1.ws", "minio-s1.ws"]

    def test_stop_redis_is_noop(self, manager, driver):
        manager.create(name="cache", type="redis")

        manager.stop("cache")

        assert driver.calls == []

    def test_stop_unknown(self, manager):
        with pytest.raises(NotFoundError):
            manager.stop("nope")


class TestUse:
    """use()"""

    def test_use_sets_default(self, manager, store, persistence, minio_props):
        manager.create(**minio_props)
        manager.create(name="s2", type="redis")

        manager.use("s2")

        assert store.default_name == "s2"
        assert persistence.data["default"] == "s2"

    def test_use_unknown_keeps_default(self, manager, store, persistence, minio_props):
        manager.create(**minio_props)
        writes = persistence.writes

        with pytest.raises(NotFoundError):
            manager.use("s2")

        assert store.default_name == "s1"
        assert persistence.writes == writes


class TestList:

    def test_list_is_ordered_and_read_only(self, manager, persistence, driver, minio_props):
        manager.create(**minio_props)
        manager.create(name="cache", type="redis")
        writes = persistence.writes

        rows = manager.list()

        assert [(r.name, r.type, r.container_name, r.is_default) for r in rows] == [
            ("s1", "minio", "minio-s1.ws", True),
            ("cache", "redis", "redis-cache.ws", False),
        ]
        assert persistence.writes == writes
        assert driver.calls == []
