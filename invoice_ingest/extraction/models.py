from dataclasses import dataclass, field


@dataclass(frozen=True)
class PageInput:
    """One page handed to the recognition service, as text or as an image."""

    number: int
    text: str = ""
    image: bytes | None = field(default=None, repr=False)
    image_mime_type: str = "image/png"

    @property
    def is_image(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class ExtractedItem:
    """A single financial term recognized on a page."""

    page: int
    term: str
    value: str
    confidence: int
    evidence: str | None = None


@dataclass
class DocumentExtraction:
    """Extraction output for one submitted file."""

    file_name: str
    items: list[ExtractedItem] = field(default_factory=list)
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.items
