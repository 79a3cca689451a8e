"""In-memory audit session with last-started-wins semantics."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from stock_audit.engine.records import AnalysisResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommittedRun:
    """Results of the most recent successful run."""

    token: int
    results: tuple[AnalysisResult, ...]
    profile: str
    committed_at: str


class AuditSession:
    """
    Tracks audit runs so a slow earlier run can never overwrite a newer one.

    begin() hands out increasing tokens. commit() stores results only if its
    token is still the latest started run. A failed run records its error
    and leaves previously committed results untouched.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest_token = 0
        self._committed: CommittedRun | None = None
        self._last_error: str | None = None

    def begin(self) -> int:
        """Start a run and return its token."""
        with self._lock:
            self._latest_token += 1
            return self._latest_token

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._latest_token

    def commit(self, token: int, results: list[AnalysisResult], profile: str) -> bool:
        """
        Store results if token belongs to the latest run.

        Returns:
            True if stored, False if a newer run has started since
        """
        with self._lock:
            if token != self._latest_token:
                logger.info(
                    f"Discarding results of superseded run {token} (latest={self._latest_token})"
                )
                return False
            self._committed = CommittedRun(
                token=token,
                results=tuple(results),
                profile=profile,
                committed_at=datetime.utcnow().isoformat() + "Z",
            )
            self._last_error = None
            return True

    def fail(self, token: int, message: str) -> None:
        """Record a failed run. Committed results are kept."""
        with self._lock:
            if token == self._latest_token:
                self._last_error = message
        logger.warning(f"Audit run {token} failed: {message}")

    @property
    def committed(self) -> CommittedRun | None:
        with self._lock:
            return self._committed

    @property
    def last_error(self) -> str | None:
        with self._lock:
            return self._last_error

    def reset(self) -> None:
        """Drop committed results and any pending error (a page reset)."""
        with self._lock:
            self._latest_token += 1
            self._committed = None
            self._last_error = None


# Global instance
audit_session = AuditSession()
