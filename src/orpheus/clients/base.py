"""
Request schemas and protocols for the external services.

Stages depend only on these protocols; concrete clients are injected by
the pipeline factory, and tests substitute fakes.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


class CompletionRequest(BaseModel):
    """A single system + user turn sent to a language model."""

    model: str
    system_instruction: str
    user_message: str
    max_output_tokens: int | None = Field(default=None, gt=0)


class ImageRequest(BaseModel):
    """Input schema for image generation."""

    model: str
    prompt: str = Field(min_length=1)
    size: str = Field(default="1024x1024", pattern="^(1024x1024|1024x1792|1792x1024)$")
    quality: str = Field(default="standard", pattern="^(standard|hd)$")
    style: str = Field(default="natural", pattern="^(vivid|natural)$")
    count: int = Field(default=1, ge=1, le=1)


class SpeechRequest(BaseModel):
    """Input schema for speech synthesis."""

    model: str
    voice: str
    input: str = Field(min_length=1)
    style_instruction: str | None = None


@runtime_checkable
class LanguageModel(Protocol):
    async def complete(self, request: CompletionRequest) -> str:
        """Return the text of a single completion ("" when the model returned nothing)."""
        ...


@runtime_checkable
class ImageGenerator(Protocol):
    async def generate(self, request: ImageRequest) -> list[str]:
        """Return the transient URLs of the generated images."""
        ...


@runtime_checkable
class SpeechSynthesizer(Protocol):
    async def synthesize(self, request: SpeechRequest) -> bytes:
        """Return the encoded audio for the request."""
        ...


@runtime_checkable
class ImageProxy(Protocol):
    async def fetch(self, image_url: str) -> bytes:
        """Fetch a transient image through the same-origin proxy."""
        ...
