import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookingpass.api.v1.router import router as v1_router
from bookingpass.core.config import settings
from bookingpass.core.errors import RenderingFailure, SigningSecretMissing
from bookingpass.core.signer import digest_capability
from bookingpass.middleware.correlation import CorrelationIdMiddleware
from bookingpass.observability.verification_metrics import verification_metrics
from bookingpass.schemas.errors import ErrorEnvelope

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(CorrelationIdMiddleware)
logger = logging.getLogger(__name__)

cors_origins = [
    origin.strip()
    for origin in settings.api_cors_allowed_origins.split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins or ["http://localhost:5173"],
    allow_credentials=settings.api_cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router)


@app.on_event("startup")
async def report_digest_capability() -> None:
    capability = digest_capability()
    if capability["weak"]:
        logger.warning(
            "Booking passes are signed with the weak %s fallback; configured digest %s is unavailable.",
            capability["algorithm"],
            settings.qr_digest_algorithm,
        )
    if not settings.qr_signing_secret:
        logger.warning("QR_SIGNING_SECRET is not set; pass issuance and verification are disabled.")


@app.get("/health")
def health():
    return {
        "ok": True,
        "service": settings.app_name,
        "env": settings.app_env,
        "api_version": settings.api_version,
        "signing_secret_configured": bool(settings.qr_signing_secret),
        "single_use_enabled": settings.qr_single_use,
        "validity_window_ms": settings.qr_validity_window_ms,
        "digest": digest_capability(),
        "verification": verification_metrics.snapshot(),
    }


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    correlation_id = getattr(request.state, "correlation_id", "n/a")
    envelope = ErrorEnvelope.build(code=code, message=message, correlation_id=correlation_id)
    return JSONResponse(status_code=status_code, content=envelope.model_dump())


@app.exception_handler(RenderingFailure)
async def rendering_failure_handler(request: Request, exc: RenderingFailure):
    logger.error("Booking pass rendering failed: %s (cause=%r)", exc, exc.cause)
    return _error_response(request, 502, exc.reason, str(exc))


@app.exception_handler(SigningSecretMissing)
async def secret_missing_handler(request: Request, exc: SigningSecretMissing):
    return _error_response(request, 503, exc.reason, str(exc))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    return _error_response(request, 500, "internal_error", str(exc))
