from __future__ import annotations

import hashlib
import logging

from bookingpass.core.config import settings
from bookingpass.core.errors import DigestUnavailable, SigningSecretMissing

logger = logging.getLogger(__name__)

WEAK_DIGEST_NAME = "rolling32"
DIGEST_SIZE_BYTES = 32


def canonical_message(booking_id: int, issued_at: int, secret: str) -> str:
    return f"{booking_id}-{issued_at}-{secret}"


def _rolling_hash_hex(message: str) -> str:
    # 32-bit multiply-add over UTF-16 code units. Not collision resistant.
    encoded = message.encode("utf-16-le")
    value = 0
    for index in range(0, len(encoded), 2):
        code_unit = encoded[index] | (encoded[index + 1] << 8)
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 1 << 32
    return format(abs(value), "x")


def _new_digest(algorithm: str):
    """Fixed-length 256-bit digest object, or None when the runtime can't provide one."""
    try:
        digest = hashlib.new(algorithm)
    except (ValueError, TypeError):
        return None
    # md5/sha1 are too short; shake_* report digest_size 0 and need an explicit length.
    if digest.digest_size != DIGEST_SIZE_BYTES:
        return None
    return digest


def _digest_available(algorithm: str) -> bool:
    return _new_digest(algorithm) is not None


def digest_capability() -> dict[str, object]:
    algorithm = settings.qr_digest_algorithm
    if _digest_available(algorithm):
        return {"algorithm": algorithm, "weak": False, "fallback_allowed": settings.qr_allow_weak_digest}
    return {"algorithm": WEAK_DIGEST_NAME, "weak": True, "fallback_allowed": settings.qr_allow_weak_digest}


def sign(booking_id: int, issued_at: int, secret: str) -> str:
    if not secret:
        raise SigningSecretMissing()

    message = canonical_message(booking_id, issued_at, secret)
    algorithm = settings.qr_digest_algorithm
    digest = _new_digest(algorithm)
    if digest is None:
        if not settings.qr_allow_weak_digest:
            raise DigestUnavailable(
                f"Digest '{algorithm}' is not an available 256-bit digest and the weak fallback is disabled."
            )
        logger.warning(
            "Digest %s unavailable or not 256-bit; signing with weak %s fallback (booking_id=%s)",
            algorithm,
            WEAK_DIGEST_NAME,
            booking_id,
        )
        return _rolling_hash_hex(message)

    digest.update(message.encode("utf-8"))
    return digest.hexdigest()
