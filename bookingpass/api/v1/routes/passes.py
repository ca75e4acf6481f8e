import logging

from fastapi import APIRouter, HTTPException, Response, status

from bookingpass.core.config import settings
from bookingpass.core.encoder import encode, render_qr_png
from bookingpass.core.errors import MalformedPayload
from bookingpass.core.parser import parse
from bookingpass.core.replay import consumed_passes
from bookingpass.core.validator import validate
from bookingpass.observability.verification_metrics import verification_metrics
from bookingpass.schemas.passes import (
    PassIssueRequest,
    PassIssueResponse,
    PassRenderRequest,
    PassVerifyRequest,
    PassVerifyResponse,
    RejectReason,
    VerificationResult,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_secret() -> str:
    if not settings.qr_signing_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="QR signing secret is not configured.",
        )
    return settings.qr_signing_secret


@router.post("/issue", response_model=PassIssueResponse)
def issue_pass(payload: PassIssueRequest):
    secret = _require_secret()
    artifact = encode(payload.booking_id, secret)
    verification_metrics.record_issued()
    return PassIssueResponse(
        booking_id=artifact.payload.booking_id,
        issued_at=artifact.payload.issued_at,
        signature=artifact.payload.signature,
        payload_text=artifact.serialized_text,
        image_data_url=artifact.data_url,
    )


@router.post("/render")
def render_pass(payload: PassRenderRequest) -> Response:
    try:
        booking_pass = parse(payload.payload_text)
    except MalformedPayload as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return Response(content=render_qr_png(booking_pass.to_text()), media_type="image/png")


def _consume_once(raw_text: str, result: VerificationResult) -> VerificationResult:
    booking_pass = parse(raw_text)
    ttl_ms = settings.qr_validity_window_ms + settings.qr_clock_skew_ms
    if consumed_passes.consume(booking_pass.signature, ttl_ms):
        return result
    logger.warning("Replay blocked for booking pass (booking_id=%s)", booking_pass.booking_id)
    return VerificationResult.reject(RejectReason.ALREADY_USED)


@router.post("/verify", response_model=PassVerifyResponse)
def verify_pass(payload: PassVerifyRequest):
    secret = _require_secret()
    result = validate(payload.raw_text, secret, settings.qr_validity_window_ms)
    if result.valid and settings.qr_single_use:
        result = _consume_once(payload.raw_text, result)
    verification_metrics.record_result(result)
    return PassVerifyResponse(**result.model_dump(), scanner_id=payload.scanner_id)
