from invoice_ingest.config.settings import Settings
from invoice_ingest.pdf.base import BasePdfExtractor
from invoice_ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from invoice_ingest.pdf.pymupdf_adapter import PdfPageRenderer, PyMuPdfAdapter


class PdfExtractorFactory:
    """Creates the page text extractor and page renderer named in settings."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()

    @classmethod
    def create_renderer(cls, settings: Settings) -> PdfPageRenderer:
        """Scanned pages are always rasterized with PyMuPDF, whatever the text engine."""
        if settings.extraction_render_dpi <= 0:
            raise ValueError("extraction_render_dpi must be positive")
        return PdfPageRenderer(dpi=settings.extraction_render_dpi)
