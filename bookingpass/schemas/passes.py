import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DIGITS = re.compile(r"[0-9]+")


class RejectReason(StrEnum):
    INVALID_FORMAT = "invalid_format"
    NOT_YET_VALID = "not_yet_valid"
    EXPIRED = "expired"
    INVALID_SIGNATURE = "invalid_signature"
    ALREADY_USED = "already_used"


class BookingPass(BaseModel):
    """Signed credential carried inside the QR code.

    Wire names are camelCase and the field order is fixed; serializing with
    ``by_alias=True`` yields the canonical compact JSON form.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    booking_id: int = Field(alias="bookingId", ge=0)
    issued_at: int = Field(alias="issuedAt", ge=0)
    signature: str = Field(min_length=1)

    @field_validator("booking_id", "issued_at", mode="before")
    @classmethod
    def _normalize_integer(cls, value: Any) -> Any:
        # Scanners and older encoders may hand back numbers as strings or floats.
        if isinstance(value, bool):
            raise ValueError("must be an integer, not a boolean")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ValueError("must be a whole number")
        if isinstance(value, str):
            text = value.strip()
            if _DIGITS.fullmatch(text):
                return int(text)
        raise ValueError("must be a non-negative integer")

    def to_text(self) -> str:
        return self.model_dump_json(by_alias=True)


class VerificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    booking_id: int | None = None
    reason: RejectReason | None = None

    @classmethod
    def accept(cls, booking_id: int) -> "VerificationResult":
        return cls(valid=True, booking_id=booking_id)

    @classmethod
    def reject(cls, reason: RejectReason | str) -> "VerificationResult":
        return cls(valid=False, reason=RejectReason(reason))


class PassIssueRequest(BaseModel):
    booking_id: int = Field(gt=0)


class PassIssueResponse(BaseModel):
    booking_id: int
    issued_at: int
    signature: str
    payload_text: str
    image_data_url: str


class PassRenderRequest(BaseModel):
    payload_text: str


class PassVerifyRequest(BaseModel):
    raw_text: str
    scanner_id: str


class PassVerifyResponse(VerificationResult):
    scanner_id: str
