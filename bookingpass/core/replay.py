from __future__ import annotations

from threading import Lock
from time import monotonic


class ConsumedPassStore:
    """In-process record of passes already accepted once.

    Entries only need to outlive the validity window; after that the
    validator rejects the pass as expired anyway.
    """

    def __init__(self) -> None:
        self._expiry_by_key: dict[str, float] = {}
        self._lock = Lock()

    def consume(self, key: str, ttl_ms: int) -> bool:
        """Mark ``key`` as used. Returns False if it was already consumed."""
        now = monotonic()
        expires_at = now + max(1, int(ttl_ms)) / 1000
        with self._lock:
            self._purge(now)
            if key in self._expiry_by_key:
                return False
            self._expiry_by_key[key] = expires_at
            return True

    def is_consumed(self, key: str) -> bool:
        with self._lock:
            expires_at = self._expiry_by_key.get(key)
            return expires_at is not None and expires_at >= monotonic()

    def __len__(self) -> int:
        with self._lock:
            self._purge(monotonic())
            return len(self._expiry_by_key)

    def clear(self) -> None:
        with self._lock:
            self._expiry_by_key.clear()

    def _purge(self, now: float) -> None:
        expired = [key for key, expires_at in self._expiry_by_key.items() if expires_at < now]
        for key in expired:
            self._expiry_by_key.pop(key, None)


consumed_passes = ConsumedPassStore()
