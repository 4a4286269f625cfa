"""Core storage interface."""

from abc import ABC, abstractmethod


class StorageException(Exception):
    """Base exception for storage operations."""

    pass


class StorageProvider(ABC):
    """Abstract base class for the pipeline's object storage."""

    bucket: str

    @abstractmethod
    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: str | None = None,
        upsert: bool = False,
    ) -> str:
        """Upload content and return the stored path.

        Raises:
            StorageException: On upload failure
        """
        pass

    @abstractmethod
    def public_url(self, path: str) -> str:
        """Build the public URL for a path without contacting the service."""
        pass

    @abstractmethod
    async def get_public_url(self, path: str) -> str | None:
        """Ask the storage service for the public URL of a path."""
        pass

    @abstractmethod
    async def exists(self, url: str) -> bool:
        """Check that a public URL is reachable."""
        pass

    @abstractmethod
    async def delete(self, paths: list[str]) -> bool:
        """Delete stored objects by path."""
        pass
