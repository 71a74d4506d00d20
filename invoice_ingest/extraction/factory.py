from typing import ClassVar

from invoice_ingest.config.settings import Settings
from invoice_ingest.extraction.base import BaseBatchExtractor
from invoice_ingest.extraction.client_base import BaseRecognitionClient
from invoice_ingest.extraction.example_client_adapter import ExampleClientAdapter
from invoice_ingest.extraction.extractor import BatchExtractor
from invoice_ingest.extraction.openai_client_adapter import OpenAIClientAdapter
from invoice_ingest.extraction.pages import PageSplitter
from invoice_ingest.pdf.factory import PdfExtractorFactory


class ExtractorFactory:
    """Creates the configured batch extractor."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("example", "openai", "openai_compatible")

    @classmethod
    def create(cls, settings: Settings) -> BaseBatchExtractor:
        """Create a configured batch extractor from application settings."""
        provider = settings.extraction_provider.lower()
        page_splitter = PageSplitter(
            pdf_extractor=PdfExtractorFactory.create(settings),
            renderer=PdfExtractorFactory.create_renderer(settings),
        )
        return BatchExtractor(
            client=cls._create_client(provider, settings),
            page_splitter=page_splitter,
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.extraction_temperature,
            max_workers=settings.extraction_max_workers,
        )

    @classmethod
    def _create_client(cls, provider: str, settings: Settings) -> BaseRecognitionClient:
        if provider == "example":
            return ExampleClientAdapter()
        if provider == "openai":
            return OpenAIClientAdapter(
                api_key=settings.extraction_openai_api_key,
                timeout_seconds=settings.extraction_openai_timeout_seconds,
            )
        if provider == "openai_compatible":
            base_url = settings.extraction_openai_compatible_base_url.strip()
            if not base_url:
                raise ValueError(
                    "extraction_openai_compatible_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return OpenAIClientAdapter(
                api_key=settings.extraction_openai_compatible_api_key,
                timeout_seconds=settings.extraction_openai_compatible_timeout_seconds,
                base_url=base_url,
            )
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        if provider == "example":
            return "example"
        if provider == "openai_compatible":
            return settings.extraction_openai_compatible_model_name
        return settings.extraction_openai_model_name
