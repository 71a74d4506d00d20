import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from invoice_ingest.config.settings import Settings
from invoice_ingest.database.connection import close_pool, init_pool
from invoice_ingest.database.repositories.document_repository import DocumentRepository
from invoice_ingest.database.repositories.job_repository import JobRepository
from invoice_ingest.database.repositories.result_repository import ResultRepository
from invoice_ingest.ingestion.exceptions import SubmissionFailedError
from invoice_ingest.ingestion.models import IncomingFile
from invoice_ingest.ingestion.orchestrator import build_orchestrator
from invoice_ingest.ingestion.queries import IngestionQueries
from invoice_ingest.logging.logger import Log
from invoice_ingest.storage.factory import StorageFactory
from invoice_ingest.worker.job_runner import JobRunner
from invoice_ingest.worker.worker import Worker


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoice-ingest",
        description="Invoice ingestion worker and submission tools.",
    )
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("worker", help="Run the job worker loop (default)")

    submit = commands.add_parser("submit", help="Submit invoice files as a new job")
    submit.add_argument("--owner", required=True, help="Owner id the job belongs to")
    submit.add_argument("files", nargs="+", type=Path, help="Invoice files to ingest")

    status = commands.add_parser("status", help="Show a job's status and results")
    status.add_argument("--owner", required=True, help="Owner id the job belongs to")
    status.add_argument("job_id", help="Job id returned by submit")
    status.add_argument("--results", action="store_true", help="Also list extracted results")
    return parser


def run_worker(settings: Settings) -> int:
    orchestrator = build_orchestrator(settings)
    job_repo = JobRepository()
    job_runner = JobRunner(
        orchestrator,
        DocumentRepository(),
        StorageFactory.create(settings),
    )
    Worker(job_repo, job_runner, settings).run()
    return 0


def run_submit(settings: Settings, owner_id: str, paths: Sequence[Path]) -> int:
    files = [IncomingFile(name=path.name, content=path.read_bytes()) for path in paths]
    try:
        job_id = build_orchestrator(settings).submit(owner_id, files)
    except SubmissionFailedError as exc:
        Log.error(f"Submission failed: {exc}")
        return 1
    print(job_id)
    return 0


def run_status(owner_id: str, job_id: str, with_results: bool) -> int:
    queries = IngestionQueries(JobRepository(), ResultRepository())
    job = queries.get_job_status(job_id, owner_id)
    if job is None:
        Log.error(f"Job {job_id} not found")
        return 1
    print(
        f"{job.id} {job.status} {job.progress}% "
        f"documents={job.documents_processed} records={job.total_records} "
        f"{job.message or ''}".rstrip()
    )
    if with_results:
        for result in queries.list_results(job_id, owner_id):
            print(
                f"{result.doc_name}\tp{result.page}\t{result.original_term}\t"
                f"{result.canonical}\t{result.value}\t{result.confidence}%"
            )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> run the chosen command."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        if args.command == "submit":
            return run_submit(settings, args.owner, args.files)
        if args.command == "status":
            return run_status(args.owner, args.job_id, args.results)
        return run_worker(settings)
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
