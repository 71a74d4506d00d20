from unittest.mock import MagicMock, patch

import pytest

from invoice_ingest.extraction.example_client_adapter import ExampleClientAdapter
from invoice_ingest.extraction.extractor import BatchExtractor
from invoice_ingest.extraction.factory import ExtractorFactory


def _make_settings(provider: str, **overrides: object) -> MagicMock:
    values: dict[str, object] = {
        "extraction_provider": provider,
        "extraction_temperature": 0.0,
        "extraction_max_workers": 1,
        "extraction_render_dpi": 150,
        "pdf_engine": "pdfplumber",
        "extraction_openai_api_key": "sk-test",
        "extraction_openai_model_name": "gpt-4o-mini",
        "extraction_openai_timeout_seconds": 60,
        "extraction_openai_compatible_base_url": "",
        "extraction_openai_compatible_api_key": "local",
        "extraction_openai_compatible_model_name": "llava",
        "extraction_openai_compatible_timeout_seconds": 120,
    }
    values.update(overrides)
    return MagicMock(**values)


class TestExtractorFactory:
    def test_creates_example_extractor(self) -> None:
        extractor = ExtractorFactory.create(_make_settings("example"))

        assert isinstance(extractor, BatchExtractor)
        assert isinstance(extractor._client, ExampleClientAdapter)
        assert extractor._model == "example"

    def test_creates_openai_extractor(self) -> None:
        with patch("invoice_ingest.extraction.factory.OpenAIClientAdapter") as adapter_cls:
            extractor = ExtractorFactory.create(_make_settings("OpenAI"))

        adapter_cls.assert_called_once_with(api_key="sk-test", timeout_seconds=60)
        assert extractor._model == "gpt-4o-mini"

    def test_creates_openai_compatible_extractor(self) -> None:
        settings = _make_settings(
            "openai_compatible",
            extraction_openai_compatible_base_url=" http://localhost:11434/v1 ",
        )
        with patch("invoice_ingest.extraction.factory.OpenAIClientAdapter") as adapter_cls:
            extractor = ExtractorFactory.create(settings)

        adapter_cls.assert_called_once_with(
            api_key="local",
            timeout_seconds=120,
            base_url="http://localhost:11434/v1",
        )
        assert extractor._model == "llava"

    def test_openai_compatible_requires_base_url(self) -> None:
        with pytest.raises(ValueError, match="base_url is required"):
            ExtractorFactory.create(_make_settings("openai_compatible"))

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown extraction provider"):
            ExtractorFactory.create(_make_settings("mystery"))
