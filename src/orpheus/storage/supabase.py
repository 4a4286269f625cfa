"""Supabase storage provider and shared async client."""

import httpx
from supabase import AsyncClient, create_async_client

from ..errors import ConfigurationError
from ..logging import get_logger
from .base import StorageException, StorageProvider

logger = get_logger(__name__)


class SupabaseConnection:
    """Lazily creates one async Supabase client shared by storage and records."""

    def __init__(self, url: str | None, key: str | None):
        if not url or not key:
            raise ConfigurationError("Supabase URL and key must be configured")
        self.url = url.rstrip("/")
        self.key = key
        self._client: AsyncClient | None = None

    async def get_client(self) -> AsyncClient:
        """Get or create the async Supabase client."""
        if self._client is None:
            self._client = await create_async_client(self.url, self.key)
        return self._client


class SupabaseStorageProvider(StorageProvider):
    """Supabase storage bucket with public URLs and HEAD-based reachability checks."""

    def __init__(
        self,
        connection: SupabaseConnection,
        bucket: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.connection = connection
        self.bucket = bucket
        self._http = http_client or httpx.AsyncClient()

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        cache_control: str | None = None,
        upsert: bool = False,
    ) -> str:
        file_options = {
            "content-type": content_type,
            "upsert": "true" if upsert else "false",
        }
        if cache_control:
            file_options["cache-control"] = cache_control

        try:
            client = await self.connection.get_client()
            response = await client.storage.from_(self.bucket).upload(
                path=path,
                file=content,
                file_options=file_options,  # pyright: ignore[reportArgumentType]
            )
            return getattr(response, "path", None) or path
        except Exception as e:
            logger.error("Supabase upload failed", path=path, error=str(e))
            raise StorageException(f"Supabase upload failed: {e}") from e

    def public_url(self, path: str) -> str:
        return f"{self.connection.url}/storage/v1/object/public/{self.bucket}/{path}"

    async def get_public_url(self, path: str) -> str | None:
        try:
            client = await self.connection.get_client()
            url = await client.storage.from_(self.bucket).get_public_url(path)
        except Exception as e:
            logger.error("Failed to get public URL", path=path, error=str(e))
            raise StorageException(f"Public URL lookup failed: {e}") from e
        return url or None

    async def exists(self, url: str) -> bool:
        try:
            response = await self._http.head(url)
        except httpx.HTTPError as e:
            logger.warning("Reachability check failed", url=url, error=str(e))
            return False
        return response.is_success

    async def delete(self, paths: list[str]) -> bool:
        if not paths:
            return True
        try:
            client = await self.connection.get_client()
            await client.storage.from_(self.bucket).remove(paths)  # type: ignore[reportUnknownMemberType]
            return True
        except Exception as e:
            logger.error("Supabase delete failed", paths=paths, error=str(e))
            raise StorageException(f"Delete failed: {e}") from e
