class ExtractionError(Exception):
    """Raised when a document cannot be turned into extracted items."""


class ExtractionValidationError(ExtractionError):
    """Raised when the recognition response is not the expected JSON shape."""


class RecognitionNetworkError(ExtractionError):
    """Raised when the recognition provider call fails due to network/infrastructure issues."""


class UnsupportedDocumentTypeError(ExtractionError):
    """Raised for files that are neither PDF, image nor plain text."""
