from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all PDF page text extraction adapters."""

    @abstractmethod
    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        """Extract the text layer of every page.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            One stripped string per page, in page order. Scanned pages
            without a text layer yield an empty string.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
