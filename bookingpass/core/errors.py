"""Failure taxonomy for booking pass issuance and verification."""
from __future__ import annotations


class BookingPassError(Exception):
    """Base class; ``reason`` is the machine-readable rejection code."""

    reason = "error"


class SigningSecretMissing(BookingPassError, ValueError):
    reason = "secret_missing"

    def __init__(self, message: str = "A signing secret is required.") -> None:
        super().__init__(message)


class DigestUnavailable(BookingPassError):
    reason = "digest_unavailable"


class RenderingFailure(BookingPassError):
    """The QR image could not be produced. ``cause`` holds the renderer error."""

    reason = "rendering_failure"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class MalformedPayload(BookingPassError):
    reason = "invalid_format"


class PassNotYetValid(BookingPassError):
    reason = "not_yet_valid"


class PassExpired(BookingPassError):
    reason = "expired"


class InvalidSignature(BookingPassError):
    """Digest mismatch: tampering or a wrong secret. Treat as a security event."""

    reason = "invalid_signature"
