from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass

import qrcode
from PIL import ImageColor
from qrcode.image.pil import PilImage

from bookingpass.core.clock import now_ms as current_time_ms
from bookingpass.core.config import settings
from bookingpass.core.errors import RenderingFailure
from bookingpass.core.signer import sign
from bookingpass.schemas.passes import BookingPass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassArtifact:
    payload: BookingPass
    serialized_text: str
    png: bytes

    @property
    def data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.png).decode("ascii")


def _channel_luminance(channel: int) -> float:
    value = channel / 255
    if value <= 0.03928:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def relative_luminance(color: str) -> float:
    red, green, blue = ImageColor.getrgb(color)[:3]
    return (
        0.2126 * _channel_luminance(red)
        + 0.7152 * _channel_luminance(green)
        + 0.0722 * _channel_luminance(blue)
    )


def contrast_ratio(first: str, second: str) -> float:
    lighter, darker = sorted((relative_luminance(first), relative_luminance(second)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def render_qr_png(text: str) -> bytes:
    fill_color = settings.qr_fill_color
    back_color = settings.qr_back_color
    try:
        ratio = contrast_ratio(fill_color, back_color)
    except ValueError as exc:
        raise RenderingFailure(f"Invalid QR colours {fill_color!r}/{back_color!r}.", cause=exc) from exc
    if ratio < settings.qr_min_contrast_ratio:
        raise RenderingFailure(
            f"QR colour contrast {ratio:.2f} is below the minimum {settings.qr_min_contrast_ratio:.2f}."
        )

    try:
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=settings.qr_box_size,
            border=settings.qr_border,
            image_factory=PilImage,
        )
        qr.add_data(text)
        qr.make(fit=True)
        image = qr.make_image(fill_color=fill_color, back_color=back_color)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except Exception as exc:
        logger.warning("QR rendering failed (payload_length=%s): %s", len(text), exc)
        raise RenderingFailure("Failed to render QR code.", cause=exc) from exc
    return buffer.getvalue()


def encode(booking_id: int, secret: str, *, now_ms: int | None = None) -> PassArtifact:
    if isinstance(booking_id, bool) or not isinstance(booking_id, int) or booking_id <= 0:
        raise ValueError("booking_id must be a positive integer.")

    issued_at = current_time_ms() if now_ms is None else now_ms
    if isinstance(issued_at, bool) or not isinstance(issued_at, int) or issued_at < 0:
        raise ValueError("issued_at must be a non-negative integer.")
    payload = BookingPass(
        bookingId=booking_id,
        issuedAt=issued_at,
        signature=sign(booking_id, issued_at, secret),
    )
    serialized_text = payload.to_text()
    png = render_qr_png(serialized_text)
    logger.info("Issued booking pass (booking_id=%s, issued_at=%s)", booking_id, issued_at)
    return PassArtifact(payload=payload, serialized_text=serialized_text, png=png)
