"""Stage and progress coordinator.

The tracker only reflects what the pipeline reports; it never retries or
cancels work itself.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..logging import get_logger, set_stage

logger = get_logger(__name__)


class Stage(str, Enum):
    IMAGE = "image"
    SCRIPT = "script"
    AUDIO = "audio"
    COMPLETE = "complete"


STAGE_ORDER = [Stage.IMAGE, Stage.SCRIPT, Stage.AUDIO, Stage.COMPLETE]


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Checkpoint:
    """Progress milestones reported by the pipeline."""

    EXTRACTING = (Stage.IMAGE, 0)
    CONCEPTS = (Stage.IMAGE, 10)
    IMAGE_GENERATED = (Stage.IMAGE, 30)
    SCRIPT = (Stage.SCRIPT, 40)
    AUDIO = (Stage.AUDIO, 70)
    PERSISTING = (Stage.COMPLETE, 90)
    DONE = (Stage.COMPLETE, 100)


class RunState(BaseModel):
    """What the presentation layer sees for one run."""

    run_id: str
    current_stage: Stage = Stage.IMAGE
    progress_percent: int = Field(default=0, ge=0, le=100)
    status: RunStatus = RunStatus.PENDING
    error: dict[str, Any] | None = None
    artifact_id: str | None = None
    used_fallback_prompt: bool = False
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


Listener = Callable[[RunState], None]


class ProgressTracker:
    """Owns the ``RunState`` of a single run and notifies listeners of changes."""

    def __init__(self, run_id: str) -> None:
        self._state = RunState(run_id=run_id)
        self._listeners: list[Listener] = []

    @property
    def state(self) -> RunState:
        return self._state.model_copy()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        self._update(status=RunStatus.RUNNING)

    def advance(self, stage: Stage, percent: int) -> None:
        """Move to a checkpoint. Stages only move forward and percent never decreases."""
        current = self._state
        if STAGE_ORDER.index(stage) < STAGE_ORDER.index(current.current_stage):
            raise ValueError(f"Cannot move back from {current.current_stage.value} to {stage.value}")
        if percent < current.progress_percent:
            raise ValueError(f"Progress cannot decrease from {current.progress_percent} to {percent}")
        set_stage(stage.value)
        self._update(current_stage=stage, progress_percent=percent)

    def reach(self, checkpoint: tuple[Stage, int]) -> None:
        stage, percent = checkpoint
        self.advance(stage, percent)

    def flag_fallback_prompt(self) -> None:
        self._update(used_fallback_prompt=True)

    def fail(self, error: dict[str, Any]) -> None:
        self._update(status=RunStatus.FAILED, error=error)

    def cancel(self, error: dict[str, Any] | None = None) -> None:
        self._update(status=RunStatus.CANCELLED, error=error)

    def complete(self, artifact_id: str) -> None:
        stage, percent = Checkpoint.DONE
        set_stage(stage.value)
        self._update(
            current_stage=stage,
            progress_percent=percent,
            status=RunStatus.SUCCEEDED,
            artifact_id=artifact_id,
        )

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update={**changes, "updated_at": datetime.now(UTC)})
        snapshot = self.state
        logger.debug(
            "Run state updated",
            stage=snapshot.current_stage.value,
            progress=snapshot.progress_percent,
            status=snapshot.status.value,
        )
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning("Progress listener raised", error=str(e))
