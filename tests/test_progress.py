"""Tests for run state tracking."""

import pytest

from orpheus.errors import ImageUploadError, RunCancelledError
from orpheus.pipeline.cancellation import CancellationToken
from orpheus.pipeline.progress import Checkpoint, ProgressTracker, RunStatus, Stage


class TestProgressTracker:
    def test_initial_state(self):
        state = ProgressTracker("run-1").state

        assert state.run_id == "run-1"
        assert state.current_stage == Stage.IMAGE
        assert state.progress_percent == 0
        assert state.status == RunStatus.PENDING
        assert state.error is None

    def test_checkpoints_move_forward(self):
        tracker = ProgressTracker("run-1")
        tracker.start()

        for checkpoint in (
            Checkpoint.EXTRACTING,
            Checkpoint.CONCEPTS,
            Checkpoint.IMAGE_GENERATED,
            Checkpoint.SCRIPT,
            Checkpoint.AUDIO,
            Checkpoint.PERSISTING,
        ):
            tracker.reach(checkpoint)

        state = tracker.state
        assert state.current_stage == Stage.COMPLETE
        assert state.progress_percent == 90
        assert state.status == RunStatus.RUNNING

    def test_stage_cannot_move_back(self):
        tracker = ProgressTracker("run-1")
        tracker.reach(Checkpoint.AUDIO)

        with pytest.raises(ValueError):
            tracker.advance(Stage.SCRIPT, 80)

    def test_percent_cannot_decrease(self):
        tracker = ProgressTracker("run-1")
        tracker.reach(Checkpoint.IMAGE_GENERATED)

        with pytest.raises(ValueError):
            tracker.advance(Stage.IMAGE, 10)

    def test_complete_sets_terminal_state(self):
        tracker = ProgressTracker("run-1")
        tracker.start()
        tracker.reach(Checkpoint.PERSISTING)
        tracker.complete("podcast-9")

        state = tracker.state
        assert state.current_stage == Stage.COMPLETE
        assert state.progress_percent == 100
        assert state.status == RunStatus.SUCCEEDED
        assert state.artifact_id == "podcast-9"

    def test_fail_records_structured_error(self):
        tracker = ProgressTracker("run-1")
        tracker.reach(Checkpoint.IMAGE_GENERATED)
        tracker.fail(ImageUploadError("boom").to_dict())

        state = tracker.state
        assert state.status == RunStatus.FAILED
        assert state.error == {
            "kind": "ImageUploadError",
            "stage": "image",
            "message": "Failed to save cover image",
        }
        assert state.progress_percent == 30

    def test_listeners_receive_snapshots(self):
        tracker = ProgressTracker("run-1")
        seen = []
        unsubscribe = tracker.subscribe(lambda state: seen.append(state.progress_percent))

        tracker.reach(Checkpoint.CONCEPTS)
        unsubscribe()
        tracker.reach(Checkpoint.SCRIPT)

        assert seen == [10]

    def test_failing_listener_does_not_break_updates(self):
        tracker = ProgressTracker("run-1")

        def broken(state):
            raise RuntimeError("listener bug")

        tracker.subscribe(broken)
        tracker.reach(Checkpoint.SCRIPT)

        assert tracker.state.progress_percent == 40

    def test_state_is_a_copy(self):
        tracker = ProgressTracker("run-1")
        snapshot = tracker.state
        tracker.reach(Checkpoint.AUDIO)

        assert snapshot.progress_percent == 0


class TestCancellationToken:
    def test_raises_once_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled("script synthesis")

        token.cancel("user closed the page")

        assert token.cancelled
        assert token.reason == "user closed the page"
        with pytest.raises(RunCancelledError, match="before script synthesis"):
            token.raise_if_cancelled("script synthesis")
