from invoice_ingest.database.models import DOCUMENT_FAILED, DocumentRecord, JobRecord
from invoice_ingest.database.repositories.document_repository import DocumentRepository
from invoice_ingest.ingestion.exceptions import JobAlreadyClaimedError
from invoice_ingest.ingestion.models import IncomingFile
from invoice_ingest.ingestion.orchestrator import IngestionOrchestrator
from invoice_ingest.logging.logger import Log
from invoice_ingest.storage.base import BaseObjectStorage


class JobRunner:
    """Load one queued job's documents from storage and hand it to the orchestrator."""

    def __init__(
        self,
        orchestrator: IngestionOrchestrator,
        document_repo: DocumentRepository,
        storage: BaseObjectStorage,
    ) -> None:
        self._orchestrator = orchestrator
        self._document_repo = document_repo
        self._storage = storage

    def run(self, job: JobRecord) -> None:
        """Execute a single job. A job claimed elsewhere is skipped.

        Any other failure before the claim is logged and the job is left
        runnable for the next poll.
        """
        Log.info("Picked up job", job_id=job.id, owner_id=job.owner_id)
        try:
            documents = self._document_repo.list_for_job(job.id, job.owner_id)
        except Exception as exc:
            Log.error(f"Job {job.id}: could not list documents, will retry: {exc}")
            return

        loaded_documents, files = self._load_files(job, documents)
        try:
            self._orchestrator.run(
                job.id,
                job.owner_id,
                loaded_documents,
                files,
                submitted_count=job.documents_submitted,
            )
        except JobAlreadyClaimedError as exc:
            Log.info(f"Skipping job {job.id}: {exc}")
        except Exception as exc:
            Log.error(f"Job {job.id} could not be started, will retry: {exc}")

    def _load_files(
        self, job: JobRecord, documents: list[DocumentRecord]
    ) -> tuple[list[DocumentRecord], list[IncomingFile]]:
        """Read each document's bytes. Unreadable documents are left out of the run."""
        loaded: list[DocumentRecord] = []
        files: list[IncomingFile] = []
        for document in documents:
            try:
                content = self._storage.load(document.storage_path)
            except Exception as exc:
                Log.warning(f"Job {job.id}: cannot read document {document.id}: {exc}")
                self._mark_failed(job, document)
                continue
            loaded.append(document)
            files.append(
                IncomingFile(name=document.name, content=content, mime_type=document.mime_type)
            )
        return loaded, files

    def _mark_failed(self, job: JobRecord, document: DocumentRecord) -> None:
        try:
            self._document_repo.update_status(document.id, job.owner_id, DOCUMENT_FAILED)
        except Exception as exc:
            Log.warning(f"Job {job.id}: could not mark document {document.id} failed: {exc}")
