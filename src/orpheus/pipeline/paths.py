"""Storage path scheme for cover images and narration audio."""

import time
import uuid
from collections.abc import Callable

Clock = Callable[[], int]
TokenFactory = Callable[[], str]


def now_millis() -> int:
    return int(time.time() * 1000)


def random_token() -> str:
    return uuid.uuid4().hex[:13]


def cover_path(user_id: str, timestamp_ms: int, token: str) -> str:
    return f"{user_id}/covers/{timestamp_ms}-{token}.png"


def audio_path(user_id: str, timestamp_ms: int) -> str:
    return f"{user_id}/{timestamp_ms}-podcast-audio.mp3"
