import time
from collections.abc import Sequence
from pathlib import Path

from invoice_ingest.config.settings import Settings
from invoice_ingest.database.models import (
    DOCUMENT_FAILED,
    DOCUMENT_PROCESSED,
    DocumentRecord,
    NewResultRow,
)
from invoice_ingest.database.repositories.document_repository import DocumentRepository
from invoice_ingest.database.repositories.job_repository import JobRepository
from invoice_ingest.database.repositories.result_repository import ResultRepository
from invoice_ingest.database.repositories.synonym_repository import SynonymRepository
from invoice_ingest.extraction.base import BaseBatchExtractor
from invoice_ingest.extraction.factory import ExtractorFactory
from invoice_ingest.extraction.models import DocumentExtraction
from invoice_ingest.ingestion.deadline import Deadline
from invoice_ingest.ingestion.exceptions import (
    DocumentAdmissionError,
    JobAlreadyClaimedError,
    PersistenceFailedError,
    RunFailedError,
    SubmissionFailedError,
)
from invoice_ingest.ingestion.models import AdmittedDocument, IncomingFile
from invoice_ingest.ingestion.progress import (
    FINALIZING,
    INITIALIZING,
    MAPPING,
    SAVING,
    ProgressTracker,
    extraction_message,
    extraction_progress,
)
from invoice_ingest.logging.logger import Log
from invoice_ingest.storage.base import BaseObjectStorage
from invoice_ingest.storage.factory import StorageFactory
from invoice_ingest.synonyms.resolver import SynonymResolver, SynonymSnapshot


class IngestionOrchestrator:
    """Turns a batch of uploaded invoices into a tracked background job.

    submit() records the job and its documents and hands the job to the
    worker queue by moving it to running. run() drives one claimed job:
    extract -> canonicalize -> persist results -> finalize, writing a
    checkpoint to the job record at each stage.
    """

    def __init__(
        self,
        *,
        job_repo: JobRepository,
        document_repo: DocumentRepository,
        result_repo: ResultRepository,
        storage: BaseObjectStorage,
        extractor: BaseBatchExtractor,
        synonym_resolver: SynonymResolver,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._document_repo = document_repo
        self._result_repo = result_repo
        self._storage = storage
        self._extractor = extractor
        self._synonym_resolver = synonym_resolver
        self._settings = settings

    def submit(self, owner_id: str, files: Sequence[IncomingFile]) -> str:
        """Create a job for the files and queue it. Returns the job id.

        Files that cannot be stored or recorded are left out of the job.

        Raises:
            SubmissionFailedError: if no files were given, the job could not
                be created, or none of the files were admitted.
        """
        if not files:
            raise SubmissionFailedError("No files provided")

        try:
            job = self._job_repo.create(owner_id, documents_submitted=len(files))
        except Exception as exc:
            Log.error(f"Failed to create job for owner {owner_id}: {exc}")
            raise SubmissionFailedError(f"Failed to create job: {exc}") from exc

        admitted = self._admit_documents(job.id, owner_id, files)
        if not admitted:
            self._fail(job.id, owner_id, "None of the submitted documents could be stored")
            raise SubmissionFailedError(
                f"Job {job.id}: none of the {len(files)} submitted documents were admitted"
            )

        try:
            self._job_repo.mark_running(
                job.id, owner_id, f"Processing {len(admitted)} documents"
            )
        except Exception as exc:
            self._fail(job.id, owner_id, f"Failed to queue job: {exc}")
            raise SubmissionFailedError(f"Failed to queue job {job.id}: {exc}") from exc

        Log.info(
            f"Job queued: {len(admitted)}/{len(files)} documents admitted",
            job_id=job.id,
            owner_id=owner_id,
        )
        return job.id

    def run(
        self,
        job_id: str,
        owner_id: str,
        documents: Sequence[DocumentRecord],
        files: Sequence[IncomingFile],
        submitted_count: int | None = None,
    ) -> None:
        """Process a running job end to end.

        documents[i] is the record admitted for files[i]. Failures after the
        claim are reported through the job record, never raised.

        Raises:
            JobAlreadyClaimedError: if the job is not running or another run
                already claimed it. The job record is left untouched.
        """
        if len(documents) != len(files):
            raise ValueError(
                f"Job {job_id}: {len(documents)} documents but {len(files)} files"
            )
        if not self._job_repo.claim(job_id, owner_id):
            raise JobAlreadyClaimedError(
                f"Job {job_id} is not runnable or is already claimed"
            )

        submitted = submitted_count if submitted_count is not None else len(files)
        Log.info(f"Running job: {len(documents)} documents", job_id=job_id, owner_id=owner_id)
        try:
            self._execute(job_id, owner_id, documents, files, submitted)
        except Exception as exc:
            Log.exception(f"Job failed: {exc}", job_id=job_id, owner_id=owner_id)
            self._fail(job_id, owner_id, f"Processing failed: {exc}")

    def _execute(
        self,
        job_id: str,
        owner_id: str,
        documents: Sequence[DocumentRecord],
        files: Sequence[IncomingFile],
        submitted: int,
    ) -> None:
        tracker = ProgressTracker(self._job_repo, job_id, owner_id)
        deadline = Deadline(self._settings.run_timeout_seconds)

        tracker.report(*INITIALIZING)
        synonyms = self._synonym_resolver.snapshot(owner_id)
        deadline.check("initializing extraction")

        def on_progress(current: int, total: int, name: str) -> None:
            deadline.check(f"extracting {name}")
            tracker.report(
                extraction_progress(current, total),
                extraction_message(name, current, total),
            )

        extractions = self._extractor.extract(files, on_progress)
        if len(extractions) != len(documents):
            raise RunFailedError(
                f"Extractor returned {len(extractions)} results for {len(documents)} documents"
            )
        deadline.check("extracting documents")

        tracker.report(*MAPPING)
        rows = self._build_rows(job_id, owner_id, documents, extractions, synonyms)
        deadline.check("mapping extracted terms")

        tracker.report(*SAVING)
        written = self._persist(job_id, rows)
        self._update_document_statuses(job_id, owner_id, documents, extractions)

        tracker.report(*FINALIZING)
        time.sleep(self._settings.finalize_pause_seconds)

        self._job_repo.mark_done(
            job_id,
            owner_id,
            documents_processed=submitted,
            total_records=written,
            message=(
                f"Successfully extracted {written} financial terms "
                f"from {submitted} documents"
            ),
        )
        Log.info(
            f"Job completed: {written} records from {submitted} documents",
            job_id=job_id,
            owner_id=owner_id,
        )

    def _admit_documents(
        self, job_id: str, owner_id: str, files: Sequence[IncomingFile]
    ) -> list[AdmittedDocument]:
        admitted: list[AdmittedDocument] = []
        for file in files:
            try:
                admitted.append(self._admit(job_id, owner_id, file))
            except DocumentAdmissionError as exc:
                Log.warning(f"Job {job_id}: {exc}")
        return admitted

    def _admit(self, job_id: str, owner_id: str, file: IncomingFile) -> AdmittedDocument:
        if not file.name:
            raise DocumentAdmissionError("Rejected a file without a name")
        if file.size == 0:
            raise DocumentAdmissionError(f"Rejected '{file.name}': file is empty")
        if file.size > self._settings.max_document_bytes:
            raise DocumentAdmissionError(
                f"Rejected '{file.name}': {file.size} bytes exceeds the "
                f"{self._settings.max_document_bytes} byte limit"
            )
        try:
            storage_path = self._storage.store(owner_id, job_id, file)
            record = self._document_repo.create(
                owner_id=owner_id,
                job_id=job_id,
                name=file.name,
                storage_path=storage_path,
                file_size=file.size,
                mime_type=file.content_type,
            )
        except Exception as exc:
            raise DocumentAdmissionError(f"Failed to admit '{file.name}': {exc}") from exc
        return AdmittedDocument(record=record, file=file)

    def _build_rows(
        self,
        job_id: str,
        owner_id: str,
        documents: Sequence[DocumentRecord],
        extractions: Sequence[DocumentExtraction],
        synonyms: SynonymSnapshot,
    ) -> list[NewResultRow]:
        rows: list[NewResultRow] = []
        for document, extraction in zip(documents, extractions):
            if extraction.is_empty:
                reason = f": {extraction.error}" if extraction.error else ""
                Log.info(f"Job {job_id}: no items from '{document.name}'{reason}")
                continue
            record = self._document_repo.find_by_id(document.id, owner_id)
            if record is None:
                Log.warning(f"Job {job_id}: document {document.id} not found, skipping")
                continue
            for item in extraction.items:
                rows.append(
                    NewResultRow(
                        job_id=job_id,
                        owner_id=owner_id,
                        doc_id=record.id,
                        doc_name=record.name,
                        page=item.page,
                        original_term=item.term,
                        canonical=synonyms.resolve(item.term),
                        value=item.value,
                        confidence=item.confidence,
                        evidence=item.evidence,
                    )
                )
        return rows

    def _persist(self, job_id: str, rows: list[NewResultRow]) -> int:
        try:
            written = self._result_repo.bulk_insert(rows)
        except Exception as exc:
            raise PersistenceFailedError(f"Failed to save extracted data: {exc}") from exc
        Log.info(f"Job {job_id}: saved {written} results")
        return written

    def _update_document_statuses(
        self,
        job_id: str,
        owner_id: str,
        documents: Sequence[DocumentRecord],
        extractions: Sequence[DocumentExtraction],
    ) -> None:
        for document, extraction in zip(documents, extractions):
            status = DOCUMENT_FAILED if extraction.error else DOCUMENT_PROCESSED
            try:
                self._document_repo.update_status(document.id, owner_id, status)
            except Exception as exc:
                Log.warning(
                    f"Job {job_id}: could not mark document {document.id} {status}: {exc}"
                )

    def _fail(self, job_id: str, owner_id: str, message: str) -> None:
        try:
            self._job_repo.mark_error(job_id, owner_id, message)
        except Exception as exc:
            Log.exception(f"Job {job_id}: could not record failure '{message}': {exc}")


def build_orchestrator(
    settings: Settings,
    files_root: Path | None = None,
) -> IngestionOrchestrator:
    """Build an IngestionOrchestrator with all required adapters."""
    return IngestionOrchestrator(
        job_repo=JobRepository(),
        document_repo=DocumentRepository(),
        result_repo=ResultRepository(),
        storage=StorageFactory.create(settings, files_root=files_root),
        extractor=ExtractorFactory.create(settings),
        synonym_resolver=SynonymResolver(SynonymRepository()),
        settings=settings,
    )
