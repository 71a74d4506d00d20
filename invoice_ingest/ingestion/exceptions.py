class IngestionError(Exception):
    """Base exception for all ingestion-related errors."""


class SubmissionFailedError(IngestionError):
    """Raised when a submission admits no documents or its job cannot be created."""


class DocumentAdmissionError(IngestionError):
    """Raised when one submitted file cannot be stored or recorded."""


class RunFailedError(IngestionError):
    """Raised for unexpected failures during a run."""


class PersistenceFailedError(RunFailedError):
    """Raised when the bulk write of a job's results fails."""


class RunTimeoutError(RunFailedError):
    """Raised when a run exceeds its deadline."""


class JobAlreadyClaimedError(IngestionError):
    """Raised when a run is requested for a job another run already owns."""
