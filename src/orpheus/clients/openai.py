"""
OpenAI-backed implementations of the language-model, image and speech clients.
"""

from openai import AsyncOpenAI

from ..logging import get_logger
from .base import CompletionRequest, ImageRequest, SpeechRequest

logger = get_logger(__name__)


class OpenAILanguageModel:
    """Chat-completions client for a single system + user exchange."""

    def __init__(self, client: AsyncOpenAI):
        self._client = client

    async def complete(self, request: CompletionRequest) -> str:
        kwargs = {}
        if request.max_output_tokens is not None:
            kwargs["max_tokens"] = request.max_output_tokens

        completion = await self._client.chat.completions.create(
            model=request.model,
            messages=[
                {"role": "system", "content": request.system_instruction},
                {"role": "user", "content": request.user_message},
            ],
            **kwargs,
        )

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class OpenAIImageGenerator:
    """DALL-E image generation returning transient result URLs."""

    def __init__(self, client: AsyncOpenAI):
        self._client = client

    async def generate(self, request: ImageRequest) -> list[str]:
        response = await self._client.images.generate(
            model=request.model,
            prompt=request.prompt,
            size=request.size,  # pyright: ignore[reportArgumentType]
            quality=request.quality,  # pyright: ignore[reportArgumentType]
            style=request.style,  # pyright: ignore[reportArgumentType]
            n=request.count,
        )

        urls = [item.url for item in (response.data or []) if item.url]
        logger.debug("Image generation returned", url_count=len(urls))
        return urls


class OpenAISpeechSynthesizer:
    """Text-to-speech returning the MP3 bytes."""

    def __init__(self, client: AsyncOpenAI):
        self._client = client

    async def synthesize(self, request: SpeechRequest) -> bytes:
        kwargs = {}
        if request.style_instruction:
            kwargs["instructions"] = request.style_instruction

        response = await self._client.audio.speech.create(
            model=request.model,
            voice=request.voice,  # pyright: ignore[reportArgumentType]
            input=request.input,
            response_format="mp3",
            **kwargs,
        )
        return response.content
