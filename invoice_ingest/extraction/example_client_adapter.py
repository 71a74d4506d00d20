"""Example recognition client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseRecognitionClient and register the provider in ExtractorFactory.
"""

import json
from collections.abc import Sequence
from typing import ClassVar

from invoice_ingest.extraction.client_base import BaseRecognitionClient
from invoice_ingest.extraction.models import PageInput


class ExampleClientAdapter(BaseRecognitionClient):
    """Example adapter that returns a fixed, empty extraction JSON.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {"items": []}

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
        images: Sequence[PageInput] = (),
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, json_schema, images
        return json.dumps(self.DEFAULT_RESPONSE)
