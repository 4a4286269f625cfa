"""Tracking and best-effort removal of blobs uploaded by a failed run."""

from ..logging import get_logger
from ..storage.base import StorageProvider

logger = get_logger(__name__)


class UploadLedger:
    """Paths uploaded during one run, in upload order."""

    def __init__(self) -> None:
        self.paths: list[str] = []

    def record(self, path: str) -> None:
        self.paths.append(path)

    async def rollback(self, storage: StorageProvider) -> bool:
        """Delete every recorded path. Failures are logged, never raised."""
        if not self.paths:
            return True

        paths = list(self.paths)
        try:
            await storage.delete(paths)
        except Exception as e:
            logger.warning("Could not remove orphaned uploads", paths=paths, error=str(e))
            return False

        logger.info("Removed orphaned uploads", paths=paths)
        self.paths.clear()
        return True
