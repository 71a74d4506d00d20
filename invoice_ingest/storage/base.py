from abc import ABC, abstractmethod

from invoice_ingest.ingestion.models import IncomingFile


class BaseObjectStorage(ABC):
    """Contract for all object storage adapters."""

    @abstractmethod
    def store(self, owner_id: str, job_id: str, file: IncomingFile) -> str:
        """Persist a submitted file's bytes.

        Returns:
            Storage path that load() accepts.

        Raises:
            StorageError: if the bytes could not be written.
        """

    @abstractmethod
    def load(self, storage_path: str) -> bytes:
        """Read previously stored bytes.

        Raises:
            StoredObjectNotFoundError: if nothing is stored at the path.
            StorageError: on any other read failure.
        """
