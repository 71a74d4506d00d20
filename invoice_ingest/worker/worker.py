import time

from invoice_ingest.config.settings import Settings
from invoice_ingest.database.connection import get_connection
from invoice_ingest.database.models import JobRecord
from invoice_ingest.database.repositories.job_repository import JobRepository
from invoice_ingest.logging.logger import Log
from invoice_ingest.worker.job_runner import JobRunner


class Worker:
    """Poll loop: reap stale runs -> find a runnable job -> dispatch -> sleep when idle."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        Log.info("Worker started, polling for jobs")
        jobs_done = 0
        try:
            while True:
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                self._reap_stale_jobs()
                job = self._try_find_job()
                if job:
                    self._job_runner.run(job)
                    jobs_done += 1
                else:
                    Log.debug("No jobs available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def _try_find_job(self) -> JobRecord | None:
        """Look for the next runnable job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.find_next_runnable(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None

    def _reap_stale_jobs(self) -> None:
        """Fail runs whose worker stopped reporting, e.g. after a crash."""
        lease = self._settings.run_timeout_seconds + self._settings.stale_job_grace_seconds
        try:
            job_ids = self._job_repo.fail_stale(
                lease, f"Processing failed: run did not finish within {lease}s"
            )
        except Exception as exc:
            Log.warning(f"Database error while reaping stale jobs, will retry: {exc}")
            return
        for job_id in job_ids:
            Log.error(f"Job {job_id} timed out and was marked as error")
