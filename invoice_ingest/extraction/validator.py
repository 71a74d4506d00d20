"""Parses a recognition response and builds ExtractedItems from it."""

import json
import math
from typing import Any

from invoice_ingest.extraction.exceptions import ExtractionValidationError
from invoice_ingest.extraction.models import ExtractedItem
from invoice_ingest.logging.logger import Log

_MAX_ITEMS_PER_PAGE = 200


def parse_response(raw: str) -> dict[str, Any]:
    """Decode the provider's JSON reply, tolerating a markdown code fence.

    Raises:
        ExtractionValidationError: if the reply is not a JSON object.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionValidationError(f"Invalid JSON response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ExtractionValidationError("JSON response must be an object")
    return parsed


def build_items(data: dict[str, Any], page: int) -> list[ExtractedItem]:
    """Build items for one page. Malformed items are dropped, not fatal.

    Raises:
        ExtractionValidationError: if 'items' is missing or not a list.
    """
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise ExtractionValidationError("'items' must be a list")
    if len(raw_items) > _MAX_ITEMS_PER_PAGE:
        Log.warning(
            f"Page {page}: {len(raw_items)} items returned, keeping the first "
            f"{_MAX_ITEMS_PER_PAGE}"
        )
        raw_items = raw_items[:_MAX_ITEMS_PER_PAGE]

    items: list[ExtractedItem] = []
    for index, raw in enumerate(raw_items):
        try:
            items.append(_build_item(raw, page))
        except ExtractionValidationError as exc:
            Log.warning(f"Page {page}: dropping item at index {index}: {exc}")
    return items


def _build_item(raw: Any, page: int) -> ExtractedItem:
    if not isinstance(raw, dict):
        raise ExtractionValidationError("item must be an object")
    term = raw.get("term")
    if not isinstance(term, str) or not term.strip():
        raise ExtractionValidationError("'term' must be a non-empty string")
    return ExtractedItem(
        page=page,
        term=term.strip(),
        value=_build_value(raw.get("value")),
        confidence=_build_confidence(raw.get("confidence")),
        evidence=_build_evidence(raw.get("evidence")),
    )


def _build_value(raw: Any) -> str:
    # Kept as recognized: no currency or locale normalization.
    if isinstance(raw, bool) or raw is None:
        raise ExtractionValidationError("'value' must be a string or number")
    if isinstance(raw, (int, float)):
        return str(raw)
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    raise ExtractionValidationError("'value' must be a non-empty string or number")


def _build_confidence(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ExtractionValidationError("'confidence' must be a number")
    if isinstance(raw, str):
        try:
            raw = float(raw.strip().rstrip("%"))
        except ValueError as exc:
            raise ExtractionValidationError("'confidence' must be a number") from exc
    if not isinstance(raw, (int, float)) or not math.isfinite(raw):
        raise ExtractionValidationError("'confidence' must be a finite number")
    return max(0, min(100, round(raw)))


def _build_evidence(raw: Any) -> str | None:
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None
