"""wocker-storage: named MinIO/Redis storages backed by containers."""

__version__ = "0.1.0"
