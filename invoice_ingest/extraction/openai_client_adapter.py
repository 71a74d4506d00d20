import base64
from collections.abc import Sequence
from typing import Any

import httpx
import openai

from invoice_ingest.extraction.client_base import BaseRecognitionClient
from invoice_ingest.extraction.exceptions import ExtractionError, RecognitionNetworkError
from invoice_ingest.extraction.models import PageInput


def image_data_url(page: PageInput) -> str:
    """Encode an image page as a base64 data URL for vision input."""
    if page.image is None:
        raise ValueError(f"Page {page.number} has no image")
    encoded = base64.b64encode(page.image).decode("ascii")
    return f"data:{page.image_mime_type};base64,{encoded}"


class OpenAIClientAdapter(BaseRecognitionClient):
    """Recognition AI client adapter built on OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=1,
        )

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
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "invoice_extraction",
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": self._user_content(user_prompt, images)},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise RecognitionNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise RecognitionNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExtractionError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExtractionError("AI returned empty response")
        return content

    @staticmethod
    def _user_content(
        user_prompt: str, images: Sequence[PageInput]
    ) -> str | list[dict[str, Any]]:
        if not images:
            return user_prompt
        parts: list[dict[str, Any]] = [{"type": "text", "text": user_prompt}]
        for page in images:
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {"url": image_data_url(page), "detail": "high"},
                }
            )
        return parts
