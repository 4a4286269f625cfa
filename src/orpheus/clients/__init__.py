"""External service clients used by the pipeline stages."""

from .base import (
    CompletionRequest,
    ImageGenerator,
    ImageProxy,
    ImageRequest,
    LanguageModel,
    SpeechRequest,
    SpeechSynthesizer,
)

__all__ = [
    "CompletionRequest",
    "ImageGenerator",
    "ImageProxy",
    "ImageRequest",
    "LanguageModel",
    "SpeechRequest",
    "SpeechSynthesizer",
]
