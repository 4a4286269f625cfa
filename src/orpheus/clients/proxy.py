"""Client for the same-origin image proxy endpoint."""

import httpx

from ..errors import ImageFetchError
from ..logging import get_logger

logger = get_logger(__name__)


class HttpImageProxy:
    """Fetches transient image URLs through the proxy instead of directly."""

    def __init__(
        self,
        proxy_url: str,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.proxy_url = proxy_url
        self.api_key = api_key
        self._http = http_client or httpx.AsyncClient()

    def build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def fetch(self, image_url: str) -> bytes:
        try:
            response = await self._http.post(
                self.proxy_url,
                json={"imageUrl": image_url},
                headers=self.build_headers(),
            )
        except httpx.HTTPError as e:
            raise ImageFetchError(f"Image proxy request failed: {e}") from e

        if not response.is_success:
            detail = response.reason_phrase
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("error"):
                    detail = body["error"]
            except ValueError:
                pass
            logger.error("Image proxy returned an error", status=response.status_code, detail=detail)
            raise ImageFetchError(f"Failed to fetch image: {detail}")

        return response.content

    async def aclose(self) -> None:
        await self._http.aclose()
