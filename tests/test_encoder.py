import base64
import hashlib
import io

import pytest
from PIL import Image

from bookingpass.core.encoder import contrast_ratio, encode, render_qr_png
from bookingpass.core.errors import RenderingFailure, SigningSecretMissing


def test_encode_builds_signed_canonical_payload() -> None:
    artifact = encode(42, "k", now_ms=0)
    signature = hashlib.sha256(b"42-0-k").hexdigest()

    assert artifact.payload.booking_id == 42
    assert artifact.payload.issued_at == 0
    assert artifact.payload.signature == signature
    assert artifact.serialized_text == f'{{"bookingId":42,"issuedAt":0,"signature":"{signature}"}}'


def test_encode_uses_current_time_when_not_given(monkeypatch) -> None:
    monkeypatch.setattr("bookingpass.core.encoder.current_time_ms", lambda: 1700000000123)
    assert encode(7, "k").payload.issued_at == 1700000000123


def test_encode_renders_png_with_light_margin() -> None:
    artifact = encode(42, "k", now_ms=0)
    assert artifact.png.startswith(b"\x89PNG\r\n\x1a\n")

    image = Image.open(io.BytesIO(artifact.png)).convert("RGB")
    width, height = image.size
    assert width == height
    assert image.getpixel((0, 0)) == (255, 255, 255)


def test_data_url_wraps_png_bytes() -> None:
    artifact = encode(42, "k", now_ms=0)
    prefix = "data:image/png;base64,"
    assert artifact.data_url.startswith(prefix)
    assert base64.b64decode(artifact.data_url[len(prefix):]) == artifact.png


@pytest.mark.parametrize("booking_id", [0, -3, True, "42"])
def test_encode_rejects_non_positive_booking_id(booking_id) -> None:
    with pytest.raises(ValueError):
        encode(booking_id, "k")


@pytest.mark.parametrize("now_ms", [-1, 1.5, True])
def test_encode_rejects_invalid_issue_time(now_ms) -> None:
    with pytest.raises(ValueError, match="issued_at"):
        encode(42, "k", now_ms=now_ms)


def test_encode_requires_secret() -> None:
    with pytest.raises(SigningSecretMissing):
        encode(42, "")


def test_contrast_ratio_of_black_on_white() -> None:
    assert contrast_ratio("#000000", "#FFFFFF") == pytest.approx(21.0)
    assert contrast_ratio("#FFFFFF", "#FFFFFF") == pytest.approx(1.0)


def test_low_contrast_colours_fail_rendering(monkeypatch) -> None:
    monkeypatch.setattr("bookingpass.core.encoder.settings.qr_fill_color", "#FB5E7A")
    with pytest.raises(RenderingFailure) as exc_info:
        encode(42, "k", now_ms=0)
    assert "contrast" in str(exc_info.value)


def test_invalid_colour_fails_rendering_with_cause(monkeypatch) -> None:
    monkeypatch.setattr("bookingpass.core.encoder.settings.qr_back_color", "not-a-colour")
    with pytest.raises(RenderingFailure) as exc_info:
        render_qr_png("{}")
    assert isinstance(exc_info.value.cause, ValueError)


def test_oversized_payload_fails_rendering_with_cause() -> None:
    with pytest.raises(RenderingFailure) as exc_info:
        render_qr_png("x" * 4000)
    assert exc_info.value.cause is not None
    assert exc_info.value.reason == "rendering_failure"
