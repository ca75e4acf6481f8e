from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from threading import Lock
from typing import Any

from bookingpass.schemas.passes import RejectReason, VerificationResult


class VerificationMetrics:
    """Counts verification outcomes so signature failures can be alerted on separately."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._outcomes: Counter[str] = Counter()
        self._issued = 0
        self._last_security_event_at: datetime | None = None

    def record_issued(self) -> None:
        with self._lock:
            self._issued += 1

    def record_result(self, result: VerificationResult) -> None:
        key = "accepted" if result.valid else str(result.reason)
        with self._lock:
            self._outcomes[key] += 1
            if result.reason == RejectReason.INVALID_SIGNATURE:
                self._last_security_event_at = datetime.now(timezone.utc)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            outcomes = dict(self._outcomes)
            issued = self._issued
            last_event = self._last_security_event_at
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "issued": issued,
            "verified": outcomes,
            "security_events": outcomes.get(RejectReason.INVALID_SIGNATURE.value, 0),
            "last_security_event_at": last_event.isoformat() if last_event else None,
        }

    def clear(self) -> None:
        with self._lock:
            self._outcomes.clear()
            self._issued = 0
            self._last_security_event_at = None


verification_metrics = VerificationMetrics()
