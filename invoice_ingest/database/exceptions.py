class RepositoryError(Exception):
    """Base exception for repository-level errors."""


class JobNotFoundError(RepositoryError):
    """Raised when a job does not exist or is not visible to the owner."""


class SynonymNotFoundError(RepositoryError):
    """Raised when a synonym mapping does not exist for the owner."""


class SynonymConflictError(RepositoryError):
    """Raised when an owner already has a mapping for the same term."""
