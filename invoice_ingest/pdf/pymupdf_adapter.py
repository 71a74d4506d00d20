import pymupdf

from invoice_ingest.pdf.base import BasePdfExtractor
from invoice_ingest.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Extracts page text from PDF using PyMuPDF, and renders pages to PNG."""

    def extract_pages(self, pdf_bytes: bytes) -> list[str]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return [page.get_text().strip() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc


class PdfPageRenderer:
    """Rasterizes single PDF pages so scanned pages can be read as images."""

    def __init__(self, dpi: int = 150) -> None:
        self._dpi = dpi

    def render_page(self, pdf_bytes: bytes, page_number: int) -> bytes:
        """Render a 1-based page number to PNG bytes."""
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                page = doc.load_page(page_number - 1)
                return page.get_pixmap(dpi=self._dpi).tobytes("png")
        except Exception as exc:
            raise PdfExtractionError(
                f"pymupdf could not render page {page_number}: {exc}"
            ) from exc
