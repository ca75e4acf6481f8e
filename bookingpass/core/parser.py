from __future__ import annotations

from pydantic import ValidationError

from bookingpass.core.errors import MalformedPayload
from bookingpass.schemas.passes import BookingPass


def parse(raw_text: str | bytes) -> BookingPass:
    """Structural decode of scanned text. No expiry or signature checks."""
    if not isinstance(raw_text, (str, bytes, bytearray)):
        raise MalformedPayload(f"Expected text, got {type(raw_text).__name__}.")
    if not raw_text.strip():
        raise MalformedPayload("Scanned text is empty.")

    try:
        return BookingPass.model_validate_json(raw_text)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()})
        raise MalformedPayload(f"Malformed booking pass ({', '.join(fields)}).") from exc
