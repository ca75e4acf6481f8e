"""Verification policy for scanned booking passes.

Single pass, no retries: parse, reject issuance times beyond the clock-skew
tolerance, reject anything older than the validity window, then recompute
the digest with the verifier's secret. Every rejection comes back as a
``VerificationResult``; only a missing secret raises.
"""
from __future__ import annotations

import hmac
import logging

from bookingpass.core.clock import now_ms as current_time_ms
from bookingpass.core.config import settings
from bookingpass.core.errors import (
    BookingPassError,
    InvalidSignature,
    PassExpired,
    PassNotYetValid,
    SigningSecretMissing,
)
from bookingpass.core.parser import parse
from bookingpass.core.signer import sign
from bookingpass.schemas.passes import BookingPass, RejectReason, VerificationResult

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_WINDOW_MS = 24 * 60 * 60 * 1000
_REJECT_REASONS = frozenset(reason.value for reason in RejectReason)


def check_window(
    payload: BookingPass,
    *,
    now_ms: int,
    validity_window_ms: int,
    clock_skew_ms: int,
) -> None:
    age_ms = now_ms - payload.issued_at
    if age_ms < -clock_skew_ms:
        raise PassNotYetValid(f"Pass issued {-age_ms} ms in the future.")
    if age_ms > validity_window_ms:
        raise PassExpired(f"Pass is {age_ms} ms old; window is {validity_window_ms} ms.")


def check_signature(payload: BookingPass, secret: str) -> None:
    expected = sign(payload.booking_id, payload.issued_at, secret)
    if not hmac.compare_digest(expected.encode("utf-8"), payload.signature.encode("utf-8")):
        raise InvalidSignature("Recomputed signature does not match.")


def validate(
    raw_text: str | bytes,
    secret: str,
    validity_window_ms: int = DEFAULT_VALIDITY_WINDOW_MS,
    *,
    now_ms: int | None = None,
    clock_skew_ms: int | None = None,
) -> VerificationResult:
    if not secret:
        raise SigningSecretMissing()

    now = current_time_ms() if now_ms is None else now_ms
    skew = settings.qr_clock_skew_ms if clock_skew_ms is None else clock_skew_ms
    booking_id: int | None = None
    try:
        payload = parse(raw_text)
        booking_id = payload.booking_id
        check_window(
            payload,
            now_ms=now,
            validity_window_ms=validity_window_ms,
            clock_skew_ms=max(0, skew),
        )
        check_signature(payload, secret)
    except InvalidSignature:
        logger.warning("Security event: booking pass signature mismatch (booking_id=%s)", booking_id)
        return VerificationResult.reject(RejectReason.INVALID_SIGNATURE)
    except BookingPassError as exc:
        if exc.reason not in _REJECT_REASONS:
            logger.error("Booking pass verification could not complete (booking_id=%s): %s", booking_id, exc)
            return VerificationResult.reject(RejectReason.INVALID_SIGNATURE)
        logger.info("Booking pass rejected: reason=%s booking_id=%s detail=%s", exc.reason, booking_id, exc)
        return VerificationResult.reject(exc.reason)
    except Exception:
        logger.exception("Booking pass verification failed unexpectedly (booking_id=%s)", booking_id)
        return VerificationResult.reject(RejectReason.INVALID_SIGNATURE)

    return VerificationResult.accept(booking_id)
