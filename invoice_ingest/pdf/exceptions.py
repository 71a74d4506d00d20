class PdfExtractionError(Exception):
    """Raised when a PDF cannot be opened, split into pages or rendered."""
