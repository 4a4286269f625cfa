"""The document-to-podcast generation pipeline."""

from .cancellation import CancellationToken
from .orchestrator import GenerationPipeline
from .progress import Checkpoint, ProgressTracker, RunState, RunStatus, Stage
from .runs import RunHandle, RunRegistry

__all__ = [
    "CancellationToken",
    "Checkpoint",
    "GenerationPipeline",
    "ProgressTracker",
    "RunHandle",
    "RunRegistry",
    "RunState",
    "RunStatus",
    "Stage",
]
