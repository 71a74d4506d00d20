import mimetypes
from dataclasses import dataclass, field
from pathlib import PurePath

from invoice_ingest.database.models import DocumentRecord


@dataclass(frozen=True)
class IncomingFile:
    """One submitted file: its client-side name and raw bytes."""

    name: str
    content: bytes = field(repr=False)
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def content_type(self) -> str:
        """Declared MIME type, or one guessed from the file extension."""
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(PurePath(self.name).name)
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class AdmittedDocument:
    """A submitted file that was stored and recorded successfully."""

    record: DocumentRecord
    file: IncomingFile


@dataclass
class JobStatusView:
    """What status pollers see for a job."""

    id: str
    status: str
    progress: int
    message: str | None
    documents_processed: int
    total_records: int


@dataclass
class ResultView:
    """One extracted result as exposed to listing, export and chat readers."""

    id: str
    doc_id: str
    doc_name: str
    page: int
    original_term: str
    canonical: str
    value: str
    confidence: int
    evidence: str | None
