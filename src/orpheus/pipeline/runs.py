"""In-flight run bookkeeping with duplicate-submission rejection."""

import asyncio
from dataclasses import dataclass, field

from ..errors import DuplicateRunError, GenerationError
from ..logging import generate_run_id, get_logger
from ..models import Artifact, GenerationRequest
from .cancellation import CancellationToken
from .orchestrator import GenerationPipeline
from .progress import Listener, ProgressTracker, RunStatus

logger = get_logger(__name__)


@dataclass
class RunHandle:
    run_id: str
    user_id: str
    fingerprint: str
    tracker: ProgressTracker
    token: CancellationToken = field(default_factory=CancellationToken)
    task: asyncio.Task | None = None

    @property
    def finished(self) -> bool:
        return self.tracker.state.status not in (RunStatus.PENDING, RunStatus.RUNNING)


class RunRegistry:
    """Tracks runs by ID and rejects a second submission of the same paper.

    A submission is keyed by user and request fingerprint (file hash plus
    title). Claiming the key happens without an intervening ``await``, so
    two submissions on the same event loop cannot both claim it.
    """

    def __init__(self, pipeline: GenerationPipeline, max_finished: int = 500):
        self.pipeline = pipeline
        self.max_finished = max_finished
        self._runs: dict[str, RunHandle] = {}
        self._active: dict[tuple[str, str], str] = {}

    def _claim(self, request: GenerationRequest, user_id: str) -> RunHandle:
        fingerprint = request.fingerprint()
        key = (user_id, fingerprint)
        if key in self._active:
            logger.warning(
                "Rejected duplicate submission", user_id=user_id, active_run=self._active[key]
            )
            raise DuplicateRunError(f"Run {self._active[key]} is already generating this paper")

        run_id = generate_run_id()
        handle = RunHandle(
            run_id=run_id,
            user_id=user_id,
            fingerprint=fingerprint,
            tracker=ProgressTracker(run_id),
        )
        self._active[key] = run_id
        self._runs[run_id] = handle
        self._prune()
        return handle

    def _release(self, handle: RunHandle) -> None:
        self._active.pop((handle.user_id, handle.fingerprint), None)

    def start(self, request: GenerationRequest, user_id: str) -> RunHandle:
        """Schedule a run on the current event loop and return its handle immediately."""
        handle = self._claim(request, user_id)
        handle.task = asyncio.create_task(self._execute(handle, request))
        return handle

    async def run(
        self, request: GenerationRequest, user_id: str, listener: Listener | None = None
    ) -> Artifact:
        """Run to completion in the caller's task."""
        handle = self._claim(request, user_id)
        if listener is not None:
            handle.tracker.subscribe(listener)
        try:
            return await self.pipeline.run(request, user_id, handle.tracker, handle.token)
        finally:
            self._release(handle)

    async def _execute(self, handle: RunHandle, request: GenerationRequest) -> None:
        try:
            await self.pipeline.run(request, handle.user_id, handle.tracker, handle.token)
        except GenerationError as e:
            # Already recorded on the run state for the presentation layer
            logger.debug("Background run ended with error", run_id=handle.run_id, kind=e.kind)
        finally:
            self._release(handle)

    def get(self, run_id: str) -> RunHandle | None:
        return self._runs.get(run_id)

    def cancel(self, run_id: str) -> bool:
        handle = self._runs.get(run_id)
        if handle is None or handle.finished:
            return False
        handle.token.cancel("requested by caller")
        return True

    def _prune(self) -> None:
        finished = [run_id for run_id, handle in self._runs.items() if handle.finished]
        excess = len(finished) - self.max_finished
        for run_id in finished[: max(excess, 0)]:
            del self._runs[run_id]

    async def aclose(self) -> None:
        """Cancel runs still in flight, then close the pipeline's clients."""
        pending = [
            handle.task for handle in self._runs.values() if handle.task and not handle.task.done()
        ]
        for task in pending:
            task.cancel()
        if pending:
            logger.info("Cancelling in-flight runs", count=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
        await self.pipeline.aclose()
