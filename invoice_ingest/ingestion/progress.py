"""Checkpoint protocol for a run: fixed milestones plus the extraction band."""

from invoice_ingest.database.repositories.job_repository import JobRepository
from invoice_ingest.logging.logger import Log

INITIALIZING = (5, "initializing extraction")
MAPPING = (75, "mapping extracted terms")
SAVING = (85, "saving extracted data")
FINALIZING = (95, "finalizing")

EXTRACTION_START = 10
EXTRACTION_SPAN = 60


def extraction_progress(current: int, total: int) -> int:
    """Map extraction progress onto 10..70: 10 + floor(current / total * 60)."""
    if total <= 0:
        return EXTRACTION_START
    current = max(0, min(current, total))
    return EXTRACTION_START + (current * EXTRACTION_SPAN) // total


def extraction_message(name: str, current: int, total: int) -> str:
    return f"Extracting data from {name} ({current}/{total})"


class ProgressTracker:
    """Writes checkpoints for one job, never reporting a lower value than before."""

    def __init__(self, job_repo: JobRepository, job_id: str, owner_id: str) -> None:
        self._job_repo = job_repo
        self._job_id = job_id
        self._owner_id = owner_id
        self._progress = 0

    @property
    def progress(self) -> int:
        return self._progress

    def report(self, progress: int, message: str) -> None:
        progress = max(self._progress, min(progress, 100))
        self._job_repo.update_progress(self._job_id, self._owner_id, progress, message)
        self._progress = progress
        Log.debug(f"Job {self._job_id}: {progress}% {message}")
