"""
Same-origin image proxy.

Generated images live on a transient third-party URL that browsers cannot
fetch cross-origin. This endpoint fetches the image server-side and returns
the bytes. Only hosts listed in ``image_proxy_allowed_hosts`` are fetched;
IP-literal hosts are always refused and redirects are never followed.
"""

import ipaddress
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from ...config import Settings
from ...logging import get_logger
from ..dependencies import get_http_client, get_settings

logger = get_logger(__name__)
router = APIRouter()


class FetchImageRequest(BaseModel):
    image_url: str = Field(alias="imageUrl")


def host_allowed(host: str, allowed_hosts: list[str]) -> bool:
    host = host.lower().rstrip(".")
    for entry in allowed_hosts:
        entry = entry.lower().rstrip(".")
        if entry.startswith("*."):
            if host.endswith(entry[1:]):
                return True
        elif host == entry:
            return True
    return False


def check_image_url(url: str, allowed_hosts: list[str]) -> str | None:
    """Return why ``url`` may not be fetched, or None if it may."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return "imageUrl must be an http(s) URL"

    host = parsed.hostname
    if not host:
        return "imageUrl has no host"

    try:
        ipaddress.ip_address(host)
    except ValueError:
        pass
    else:
        return "imageUrl must not address a host by IP"

    if not host_allowed(host, allowed_hosts):
        return f"Host {host} is not an allowed image source"
    return None


@router.post("/fetch-image")
async def fetch_image(
    body: FetchImageRequest,
    http: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Fetch ``imageUrl`` and return it as a binary response."""
    rejection = check_image_url(body.image_url, settings.image_proxy_allowed_hosts)
    if rejection is not None:
        logger.warning("Image proxy refused URL", url=body.image_url, reason=rejection)
        return JSONResponse({"error": rejection}, status_code=400)

    try:
        upstream = await http.get(body.image_url, follow_redirects=False)
    except httpx.HTTPError as e:
        logger.error("Image proxy fetch failed", error=str(e))
        return JSONResponse({"error": f"Failed to fetch image: {e}"}, status_code=502)

    if not upstream.is_success:
        logger.warning("Image proxy upstream error", status=upstream.status_code)
        return JSONResponse(
            {"error": f"Failed to fetch image: {upstream.reason_phrase}"},
            status_code=502,
        )

    media_type = upstream.headers.get("content-type", "image/png")
    return Response(content=upstream.content, media_type=media_type)
