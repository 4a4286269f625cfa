"""Cover image production: generate, fetch through the proxy, upload, verify."""

from collections.abc import Callable

from ..clients.base import ImageGenerator, ImageProxy, ImageRequest
from ..errors import (
    ImageFetchError,
    ImageGenerationError,
    ImageUploadError,
    ImageVerificationError,
)
from ..logging import get_logger
from ..models import StoredObject
from ..storage.base import StorageProvider
from ..storage.retry import RetryExhausted, RetryPolicy
from .compensation import UploadLedger
from .paths import Clock, TokenFactory, cover_path, now_millis, random_token

logger = get_logger(__name__)

COVER_CONTENT_TYPE = "image/png"
COVER_CACHE_CONTROL = "31536000"


class ImageProducer:
    def __init__(
        self,
        generator: ImageGenerator,
        proxy: ImageProxy,
        storage: StorageProvider,
        retry_policy: RetryPolicy,
        model: str = "dall-e-3",
        size: str = "1024x1024",
        quality: str = "standard",
        style: str = "natural",
        clock: Clock = now_millis,
        token_factory: TokenFactory = random_token,
    ):
        self.generator = generator
        self.proxy = proxy
        self.storage = storage
        self.retry_policy = retry_policy
        self.model = model
        self.size = size
        self.quality = quality
        self.style = style
        self.clock = clock
        self.token_factory = token_factory

    async def produce(
        self,
        prompt: str,
        user_id: str,
        ledger: UploadLedger | None = None,
        on_generated: Callable[[], None] | None = None,
    ) -> StoredObject:
        """Generate a cover image and persist it to storage.

        Args:
            prompt: Composed image brief
            user_id: Owner of the storage path
            ledger: Records the uploaded path for later compensation
            on_generated: Called once the transient image URL exists

        Raises:
            ImageGenerationError: The service returned no URL
            ImageFetchError: The proxy could not deliver the image
            ImageUploadError: Every upload attempt failed
            ImageVerificationError: The public URL is not reachable
        """
        image_url = await self._generate(prompt)
        if on_generated is not None:
            on_generated()

        try:
            image_bytes = await self.proxy.fetch(image_url)
        except ImageFetchError:
            raise
        except Exception as e:
            raise ImageFetchError(f"Failed to fetch image: {e}") from e

        logger.info("Fetched generated cover image", size=len(image_bytes))

        path = cover_path(user_id, self.clock(), self.token_factory())

        async def upload() -> str:
            return await self.storage.upload(
                path,
                image_bytes,
                content_type=COVER_CONTENT_TYPE,
                cache_control=COVER_CACHE_CONTROL,
                upsert=False,
            )

        try:
            await self.retry_policy.run(upload, description="Cover upload")
        except RetryExhausted as e:
            logger.error("Cover upload failed", path=path, attempts=e.attempts)
            raise ImageUploadError(
                f"Failed to upload image after {e.attempts} attempts: {e.last_error}"
            ) from e.last_error

        if ledger is not None:
            ledger.record(path)

        public_url = self.storage.public_url(path)
        if not await self.storage.exists(public_url):
            raise ImageVerificationError(f"Cover image not reachable at {public_url}")

        logger.info("Cover image stored", path=path)
        return StoredObject(public_url=public_url, storage_path=path)

    async def _generate(self, prompt: str) -> str:
        request = ImageRequest(
            model=self.model,
            prompt=prompt,
            size=self.size,
            quality=self.quality,
            style=self.style,
            count=1,
        )
        try:
            urls = await self.generator.generate(request)
        except Exception as e:
            logger.error("Image generation call failed", error=str(e))
            raise ImageGenerationError(f"Image generation failed: {e}") from e

        if not urls:
            raise ImageGenerationError("Image generation returned no URL")
        return urls[0]
