"""Cooperative cancellation for a generation run."""

from ..errors import RunCancelledError
from ..logging import get_logger

logger = get_logger(__name__)


class CancellationToken:
    """Signals that the caller abandoned a run.

    Calls already in flight are not interrupted; the pipeline checks the
    token before starting each stage and before persisting the record.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str | None = None) -> None:
        if not self._cancelled:
            logger.info("Run cancellation requested", reason=reason)
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self, checkpoint: str) -> None:
        if self._cancelled:
            raise RunCancelledError(f"Run cancelled before {checkpoint}")
