from invoice_ingest.extraction.exceptions import UnsupportedDocumentTypeError
from invoice_ingest.extraction.models import PageInput
from invoice_ingest.ingestion.models import IncomingFile
from invoice_ingest.pdf.base import BasePdfExtractor
from invoice_ingest.pdf.pymupdf_adapter import PdfPageRenderer

_PDF_MAGIC = b"%PDF-"


class PageSplitter:
    """Turns a submitted file into the pages the recognition service reads.

    PDF pages with a text layer are sent as text; scanned pages are rendered
    to PNG. Image files are a single image page.
    """

    def __init__(self, pdf_extractor: BasePdfExtractor, renderer: PdfPageRenderer) -> None:
        self._pdf_extractor = pdf_extractor
        self._renderer = renderer

    def split(self, file: IncomingFile) -> list[PageInput]:
        content_type = file.content_type
        if content_type == "application/pdf" or file.content.startswith(_PDF_MAGIC):
            return self._split_pdf(file.content)
        if content_type.startswith("image/"):
            return [PageInput(number=1, image=file.content, image_mime_type=content_type)]
        if content_type.startswith("text/"):
            return [PageInput(number=1, text=file.content.decode("utf-8", errors="replace"))]
        raise UnsupportedDocumentTypeError(
            f"Unsupported document type '{content_type}' for '{file.name}'"
        )

    def _split_pdf(self, pdf_bytes: bytes) -> list[PageInput]:
        pages: list[PageInput] = []
        for number, text in enumerate(self._pdf_extractor.extract_pages(pdf_bytes), start=1):
            if text:
                pages.append(PageInput(number=number, text=text))
            else:
                image = self._renderer.render_page(pdf_bytes, number)
                pages.append(PageInput(number=number, image=image))
        return pages
