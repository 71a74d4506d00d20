from invoice_ingest.extraction.base import BaseBatchExtractor
from invoice_ingest.extraction.extractor import BatchExtractor
from invoice_ingest.extraction.factory import ExtractorFactory

__all__ = ["BaseBatchExtractor", "BatchExtractor", "ExtractorFactory"]
