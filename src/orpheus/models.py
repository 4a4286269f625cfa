"""
Pydantic models shared across the generation pipeline.
"""

import hashlib
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class GenerationRequest(BaseModel):
    """Everything the user submits for one run. Frozen once a run starts."""

    model_config = ConfigDict(frozen=True)

    file: bytes = Field(repr=False, description="Raw PDF bytes")
    title: str
    abstract: str = ""
    authors: str = ""
    publishing_year: int = Field(default_factory=lambda: datetime.now(UTC).year)
    field_of_research: str = ""
    keywords: str = ""
    doi: str | None = None
    is_public: bool = True

    def fingerprint(self) -> str:
        """Stable identity used to detect duplicate submissions."""
        digest = hashlib.sha256(self.file)
        digest.update(b"\0")
        digest.update(self.title.strip().encode("utf-8"))
        return digest.hexdigest()


class VisualPrompt(BaseModel):
    """Image brief handed to the image generator."""

    text: str
    is_fallback: bool = False


class StoredObject(BaseModel):
    """A blob persisted to object storage."""

    public_url: str
    storage_path: str


class Artifact(BaseModel):
    """The persisted podcast record."""

    id: str
    title: str
    abstract: str
    authors: str
    publishing_year: int
    field_of_research: str
    doi: str | None = None
    keywords: str
    cover_image_url: str
    audio_url: str
    script: str
    user_id: str
    is_public: bool
    created_at: datetime | None = None
