from pathlib import Path

from invoice_ingest.config.settings import Settings
from invoice_ingest.storage.base import BaseObjectStorage
from invoice_ingest.storage.exceptions import UnsupportedStorageDriverError
from invoice_ingest.storage.local_storage import LocalObjectStorage


class StorageFactory:
    """Creates the object storage adapter named in settings."""

    DRIVERS: tuple[str, ...] = ("local",)

    @classmethod
    def create(cls, settings: Settings, files_root: Path | None = None) -> BaseObjectStorage:
        driver = settings.storage_driver.lower()
        if driver == "local":
            return LocalObjectStorage(files_root or Path(settings.storage_root))
        raise UnsupportedStorageDriverError(
            f"storage_driver '{driver}' is not supported. Choose from: {list(cls.DRIVERS)}"
        )
