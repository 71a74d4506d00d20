from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from invoice_ingest.extraction.models import DocumentExtraction
from invoice_ingest.ingestion.models import IncomingFile

ProgressCallback = Callable[[int, int, str], None]


class BaseBatchExtractor(ABC):
    """Contract for batch extraction over a set of submitted files."""

    @abstractmethod
    def extract(
        self,
        files: Sequence[IncomingFile],
        on_progress: ProgressCallback,
    ) -> list[DocumentExtraction]:
        """Recognize financial terms in every file.

        Args:
            files: Submitted files, in submission order.
            on_progress: Called once per completed document with
                (current, total, file name); current runs 1..total.

        Returns:
            One DocumentExtraction per file, in input order. A document that
            could not be read yields an empty item list with `error` set;
            it never aborts the batch.
        """
