"""Narration script synthesis with a hard length ceiling."""

from ..clients.base import CompletionRequest, LanguageModel
from ..errors import ScriptGenerationError, ScriptTooLongError
from ..logging import get_logger
from ..models import GenerationRequest
from . import prompts

logger = get_logger(__name__)


class ScriptSynthesizer:
    """One language-model call turning the paper into a narration script.

    Scripts longer than ``max_chars`` abort the run rather than being
    truncated, since the speech service rejects longer input. Failures are
    terminal; there is no retry.
    """

    def __init__(
        self,
        llm: LanguageModel,
        model: str,
        max_chars: int = 8000,
        max_output_tokens: int | None = 3000,
    ):
        self.llm = llm
        self.model = model
        self.max_chars = max_chars
        self.max_output_tokens = max_output_tokens

    def build_request(self, request: GenerationRequest, paper_text: str) -> CompletionRequest:
        return CompletionRequest(
            model=self.model,
            system_instruction=prompts.SCRIPT_SYSTEM,
            user_message=prompts.script_message(
                title=request.title,
                abstract=request.abstract,
                authors=request.authors,
                keywords=request.keywords,
                paper_text=paper_text,
            ),
            max_output_tokens=self.max_output_tokens,
        )

    async def synthesize(self, request: GenerationRequest, paper_text: str) -> str:
        try:
            script = await self.llm.complete(self.build_request(request, paper_text))
        except Exception as e:
            logger.error("Script generation call failed", error=str(e))
            raise ScriptGenerationError(f"Script generation failed: {e}") from e

        script = script.strip()
        if not script:
            raise ScriptGenerationError("Language model returned an empty script")

        self.validate(script)

        hyperbole = prompts.find_hyperbole(script)
        if hyperbole:
            logger.warning("Script contains denylisted wording", words=hyperbole)

        logger.info("Script generated", length=len(script))
        return script

    def validate(self, script: str) -> None:
        if len(script) > self.max_chars:
            logger.error("Script exceeds speech input ceiling", length=len(script), limit=self.max_chars)
            raise ScriptTooLongError(len(script), self.max_chars)
