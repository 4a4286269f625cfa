"""Visual concept synthesis: two chained language-model calls producing an image brief."""

from ..clients.base import CompletionRequest, LanguageModel
from ..logging import get_logger
from ..models import VisualPrompt
from . import prompts

logger = get_logger(__name__)


class VisualConceptSynthesizer:
    """Derive a cover-image brief from the paper metadata.

    The first call lists concrete visual elements, the second composes them
    into a single paragraph brief. If either call fails or comes back empty,
    a templated prompt built from the title and keywords is used instead so
    image generation can always proceed. The fallback is logged and flagged
    on the returned ``VisualPrompt``.
    """

    def __init__(
        self,
        llm: LanguageModel,
        model: str,
        concept_max_tokens: int = 150,
        prompt_max_tokens: int = 200,
    ):
        self.llm = llm
        self.model = model
        self.concept_max_tokens = concept_max_tokens
        self.prompt_max_tokens = prompt_max_tokens

    async def synthesize(self, title: str, abstract: str, keywords: str) -> VisualPrompt:
        try:
            concepts = await self.llm.complete(
                CompletionRequest(
                    model=self.model,
                    system_instruction=prompts.CONCEPTS_SYSTEM,
                    user_message=prompts.concepts_message(title, abstract, keywords),
                    max_output_tokens=self.concept_max_tokens,
                )
            )
            concepts = concepts.strip()
            if not concepts:
                return self._fallback(title, keywords, reason="empty visual concepts")

            brief = await self.llm.complete(
                CompletionRequest(
                    model=self.model,
                    system_instruction=prompts.IMAGE_BRIEF_SYSTEM,
                    user_message=prompts.image_brief_message(title, keywords, concepts),
                    max_output_tokens=self.prompt_max_tokens,
                )
            )
            brief = brief.strip()
            if not brief:
                return self._fallback(title, keywords, reason="empty image brief")
        except Exception as e:
            return self._fallback(title, keywords, reason=str(e))

        logger.info("Composed cover image prompt", prompt_length=len(brief))
        return VisualPrompt(text=brief)

    def _fallback(self, title: str, keywords: str, reason: str) -> VisualPrompt:
        logger.warning("Falling back to templated cover image prompt", reason=reason)
        return VisualPrompt(text=prompts.fallback_image_prompt(title, keywords), is_fallback=True)
