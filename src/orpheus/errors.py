"""
Error taxonomy for the generation pipeline.

Every stage failure is a ``GenerationError``. The orchestrator catches them
at the top level, records ``to_dict()`` on the run state and stops the run.
``user_message`` is the short text shown to the user; the exception message
carries the detail for the logs.
"""

from typing import Any


class GenerationError(Exception):
    """Base class for terminal pipeline failures."""

    stage: str = "pipeline"
    user_message: str = "Failed to generate podcast"

    def __init__(self, message: str | None = None, *, user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "stage": self.stage, "message": self.user_message}


class ConfigurationError(GenerationError):
    stage = "configuration"
    user_message = "The generation service is not configured"


class DocumentParseError(GenerationError):
    stage = "extraction"
    user_message = "Failed to extract text from PDF. Please upload the file again."


class ImageGenerationError(GenerationError):
    stage = "image"
    user_message = "Failed to generate cover image"


class ImageFetchError(GenerationError):
    stage = "image"
    user_message = "Failed to fetch the generated cover image"


class ImageUploadError(GenerationError):
    stage = "image"
    user_message = "Failed to save cover image"


class ImageVerificationError(GenerationError):
    stage = "image"
    user_message = "Failed to verify image accessibility"


class ScriptGenerationError(GenerationError):
    stage = "script"
    user_message = "Failed to generate script"


class ScriptTooLongError(GenerationError):
    stage = "script"
    user_message = (
        "Generated script is too long for text-to-speech conversion. Please try again."
    )

    def __init__(self, length: int, limit: int):
        super().__init__(f"Script has {length} characters, limit is {limit}")
        self.length = length
        self.limit = limit


class AudioSynthesisError(GenerationError):
    stage = "audio"
    user_message = "Failed to create audio narration"


class AudioUploadError(GenerationError):
    stage = "audio"
    user_message = "Failed to upload audio file"


class AudioUrlError(GenerationError):
    stage = "audio"
    user_message = "Failed to generate public URL for audio file"


class PersistenceError(GenerationError):
    stage = "complete"
    user_message = "Failed to save podcast"


class RunCancelledError(GenerationError):
    stage = "pipeline"
    user_message = "Generation was cancelled"


class DuplicateRunError(GenerationError):
    stage = "pipeline"
    user_message = "This paper is already being turned into a podcast"
