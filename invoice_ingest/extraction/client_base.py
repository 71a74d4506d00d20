from abc import ABC, abstractmethod
from collections.abc import Sequence

from invoice_ingest.extraction.models import PageInput


class BaseRecognitionClient(ABC):
    """Contract for provider-specific recognition AI clients."""

    @abstractmethod
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
        """Return provider response as plain text.

        Args:
            images: Image pages to attach to the user message.
        """
