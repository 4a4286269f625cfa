"""
Sequential document-to-podcast pipeline.

Stages run strictly one after another; each stage's output feeds the next:

    extract text -> visual prompt -> cover image -> script -> audio -> record

Every failure is caught here, recorded on the run state as a structured
error, and re-raised. Blobs already uploaded by the failed run are deleted
on a best-effort basis. The record insert is the commit point: a run is
only complete once it succeeds.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from ..errors import GenerationError, RunCancelledError
from ..logging import generate_run_id, get_logger, run_context
from ..models import Artifact, GenerationRequest
from ..records import ArtifactRecorder
from ..storage.base import StorageProvider
from .audio import AudioProducer
from .cancellation import CancellationToken
from .compensation import UploadLedger
from .concepts import VisualConceptSynthesizer
from .extraction import TextExtractor
from .image import ImageProducer
from .progress import Checkpoint, ProgressTracker
from .script import ScriptSynthesizer

logger = get_logger(__name__)


class GenerationPipeline:
    def __init__(
        self,
        extractor: TextExtractor,
        concepts: VisualConceptSynthesizer,
        images: ImageProducer,
        scripts: ScriptSynthesizer,
        audio: AudioProducer,
        recorder: ArtifactRecorder,
        storage: StorageProvider,
        closers: Sequence[Callable[[], Awaitable[None]]] = (),
    ):
        self.extractor = extractor
        self.concepts = concepts
        self.images = images
        self.scripts = scripts
        self.audio = audio
        self.recorder = recorder
        self.storage = storage
        self._closers = list(closers)

    async def run(
        self,
        request: GenerationRequest,
        user_id: str,
        tracker: ProgressTracker | None = None,
        token: CancellationToken | None = None,
    ) -> Artifact:
        """Run one generation end to end.

        Args:
            request: The submitted paper and metadata
            user_id: Owner of the uploads and of the created record
            tracker: Receives stage and progress updates
            token: Checked before every stage; cancellation skips persistence

        Returns:
            The created podcast record

        Raises:
            GenerationError: Any stage failure, after the run state is updated
        """
        tracker = tracker or ProgressTracker(generate_run_id())
        token = token or CancellationToken()
        ledger = UploadLedger()

        with run_context(tracker.state.run_id, user_id):
            tracker.start()
            logger.info("Generation run started", title=request.title)

            try:
                artifact = await self._run_stages(request, user_id, tracker, token, ledger)
            except RunCancelledError as e:
                logger.info("Generation run cancelled", detail=str(e))
                await ledger.rollback(self.storage)
                tracker.cancel(e.to_dict())
                raise
            except GenerationError as e:
                logger.error("Generation run failed", kind=e.kind, stage=e.stage, detail=str(e))
                await ledger.rollback(self.storage)
                tracker.fail(e.to_dict())
                raise
            except asyncio.CancelledError:
                # Task cancelled from outside, e.g. at shutdown
                logger.warning("Generation run interrupted")
                await ledger.rollback(self.storage)
                tracker.cancel(RunCancelledError("Run interrupted").to_dict())
                raise
            except Exception as e:
                logger.exception("Unexpected error during generation run")
                await ledger.rollback(self.storage)
                error = GenerationError(f"Unexpected error: {e}")
                tracker.fail(error.to_dict())
                raise error from e

            tracker.complete(artifact.id)
            logger.info("Generation run complete", artifact_id=artifact.id)
            return artifact

    async def aclose(self) -> None:
        """Close the service clients the pipeline was built with."""
        for close in self._closers:
            try:
                await close()
            except Exception as e:
                logger.warning("Failed to close service client", error=str(e))

    async def _run_stages(
        self,
        request: GenerationRequest,
        user_id: str,
        tracker: ProgressTracker,
        token: CancellationToken,
        ledger: UploadLedger,
    ) -> Artifact:
        # Parsing is local and the cheapest failure, so it runs before any network call
        tracker.reach(Checkpoint.EXTRACTING)
        paper_text = await asyncio.to_thread(self.extractor.extract, request.file)

        token.raise_if_cancelled("visual concept synthesis")
        tracker.reach(Checkpoint.CONCEPTS)
        visual_prompt = await self.concepts.synthesize(
            request.title, request.abstract, request.keywords
        )
        if visual_prompt.is_fallback:
            tracker.flag_fallback_prompt()

        token.raise_if_cancelled("image generation")
        cover = await self.images.produce(
            visual_prompt.text,
            user_id,
            ledger=ledger,
            on_generated=lambda: tracker.reach(Checkpoint.IMAGE_GENERATED),
        )

        token.raise_if_cancelled("script synthesis")
        tracker.reach(Checkpoint.SCRIPT)
        script = await self.scripts.synthesize(request, paper_text)

        token.raise_if_cancelled("audio synthesis")
        tracker.reach(Checkpoint.AUDIO)
        audio = await self.audio.produce(script, user_id, ledger=ledger)

        token.raise_if_cancelled("persistence")
        tracker.reach(Checkpoint.PERSISTING)
        return await self.recorder.record(request, user_id, cover, audio, script)
