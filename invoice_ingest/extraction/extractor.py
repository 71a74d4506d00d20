"""AI-powered batch extractor for invoice documents."""

import json
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from invoice_ingest.extraction.base import BaseBatchExtractor, ProgressCallback
from invoice_ingest.extraction.client_base import BaseRecognitionClient
from invoice_ingest.extraction.exceptions import ExtractionError
from invoice_ingest.extraction.models import DocumentExtraction, ExtractedItem, PageInput
from invoice_ingest.extraction.pages import PageSplitter
from invoice_ingest.extraction.prompt_loader import (
    load_json_schema,
    load_prompt_template,
    load_system_prompt,
)
from invoice_ingest.extraction.validator import build_items, parse_response
from invoice_ingest.ingestion.models import IncomingFile
from invoice_ingest.logging.logger import Log
from invoice_ingest.pdf.exceptions import PdfExtractionError

_SCANNED_PAGE_TEXT = "(scanned page: read the attached image)"


class BatchExtractor(BaseBatchExtractor):
    """Extracts financial items page by page through a recognition client.

    Any failure while reading one document is recorded on that document's
    DocumentExtraction and the batch moves on.
    """

    def __init__(
        self,
        *,
        client: BaseRecognitionClient,
        page_splitter: PageSplitter,
        model: str,
        temperature: float = 0.0,
        max_workers: int = 1,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._page_splitter = page_splitter
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._max_workers = max(1, max_workers)
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._system_prompt = load_system_prompt(system_prompt_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def extract(
        self,
        files: Sequence[IncomingFile],
        on_progress: ProgressCallback,
    ) -> list[DocumentExtraction]:
        total = len(files)
        if total == 0:
            return []
        if self._max_workers == 1:
            return self._extract_sequential(files, on_progress)
        return self._extract_parallel(files, on_progress)

    def _extract_sequential(
        self, files: Sequence[IncomingFile], on_progress: ProgressCallback
    ) -> list[DocumentExtraction]:
        results: list[DocumentExtraction] = []
        for current, file in enumerate(files, start=1):
            results.append(self.extract_document(file))
            on_progress(current, len(files), file.name)
        return results

    def _extract_parallel(
        self, files: Sequence[IncomingFile], on_progress: ProgressCallback
    ) -> list[DocumentExtraction]:
        # Progress is reported from this thread in completion order.
        results: list[DocumentExtraction | None] = [None] * len(files)
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures: dict[Future[DocumentExtraction], int] = {
                pool.submit(self.extract_document, file): index
                for index, file in enumerate(files)
            }
            try:
                for current, future in enumerate(as_completed(futures), start=1):
                    index = futures[future]
                    results[index] = future.result()
                    on_progress(current, len(files), files[index].name)
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        return [result for result in results if result is not None]

    def extract_document(self, file: IncomingFile) -> DocumentExtraction:
        """Extract one document. Never raises for document-level failures."""
        try:
            items = self._extract_items(file)
        except (ExtractionError, PdfExtractionError) as exc:
            Log.warning(f"Extraction failed for '{file.name}': {exc}")
            return DocumentExtraction(file_name=file.name, error=str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected extraction failure for '{file.name}': {exc}")
            return DocumentExtraction(file_name=file.name, error=str(exc))

        Log.info(f"Extracted {len(items)} items from '{file.name}'")
        return DocumentExtraction(file_name=file.name, items=items)

    def _extract_items(self, file: IncomingFile) -> list[ExtractedItem]:
        items: list[ExtractedItem] = []
        for page in self._page_splitter.split(file):
            items.extend(self._extract_page(file.name, page))
        return items

    def _extract_page(self, document_name: str, page: PageInput) -> list[ExtractedItem]:
        prompt = self._build_prompt(document_name, page)
        Log.debug(f"Extraction prompt for '{document_name}' page {page.number}:\n{prompt}")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
            images=[page] if page.is_image else (),
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        return build_items(parse_response(raw_response), page.number)

    def _build_prompt(self, document_name: str, page: PageInput) -> str:
        return self._prompt_template.format(
            document_name=document_name,
            page_number=page.number,
            page_text=_SCANNED_PAGE_TEXT if page.is_image else page.text,
            json_schema=self._json_schema,
        )
