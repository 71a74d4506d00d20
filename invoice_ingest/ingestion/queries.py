from invoice_ingest.database.exceptions import JobNotFoundError
from invoice_ingest.database.repositories.job_repository import JobRepository
from invoice_ingest.database.repositories.result_repository import ResultRepository
from invoice_ingest.ingestion.models import JobStatusView, ResultView


class IngestionQueries:
    """Owner-scoped reads for status pollers and result consumers."""

    def __init__(self, job_repo: JobRepository, result_repo: ResultRepository) -> None:
        self._job_repo = job_repo
        self._result_repo = result_repo

    def get_job_status(self, job_id: str, owner_id: str) -> JobStatusView | None:
        job = self._job_repo.find_by_id(job_id, owner_id)
        if job is None:
            return None
        return JobStatusView(
            id=job.id,
            status=job.status,
            progress=job.progress,
            message=job.message,
            documents_processed=job.documents_processed,
            total_records=job.total_records,
        )

    def list_results(self, job_id: str, owner_id: str) -> list[ResultView]:
        """List a job's results in creation order.

        Raises:
            JobNotFoundError: if the job does not exist for this owner.
        """
        if self._job_repo.find_by_id(job_id, owner_id) is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return [
            ResultView(
                id=result.id,
                doc_id=result.doc_id,
                doc_name=result.doc_name,
                page=result.page,
                original_term=result.original_term,
                canonical=result.canonical,
                value=result.value,
                confidence=result.confidence,
                evidence=result.evidence,
            )
            for result in self._result_repo.list_for_job(job_id, owner_id)
        ]
