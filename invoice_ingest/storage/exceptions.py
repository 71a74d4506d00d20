class StorageError(Exception):
    """Base exception for object storage failures."""


class UnsupportedStorageDriverError(StorageError):
    """Raised when settings name a storage driver that does not exist."""


class StoredObjectNotFoundError(StorageError):
    """Raised when a storage path has no stored bytes."""
