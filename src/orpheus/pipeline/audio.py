"""Narration audio production: synthesize speech, upload, resolve the public URL."""

from ..clients.base import SpeechRequest, SpeechSynthesizer
from ..errors import AudioSynthesisError, AudioUploadError, AudioUrlError
from ..logging import get_logger
from ..models import StoredObject
from ..storage.base import StorageProvider
from ..storage.retry import RetryExhausted, RetryPolicy
from .compensation import UploadLedger
from .paths import Clock, audio_path, now_millis

logger = get_logger(__name__)

AUDIO_CONTENT_TYPE = "audio/mpeg"
AUDIO_CACHE_CONTROL = "3600"


class AudioProducer:
    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        storage: StorageProvider,
        retry_policy: RetryPolicy,
        model: str = "gpt-4o-mini-tts",
        voice: str = "echo",
        style_instruction: str | None = None,
        clock: Clock = now_millis,
    ):
        self.synthesizer = synthesizer
        self.storage = storage
        self.retry_policy = retry_policy
        self.model = model
        self.voice = voice
        self.style_instruction = style_instruction
        self.clock = clock

    async def produce(
        self, script: str, user_id: str, ledger: UploadLedger | None = None
    ) -> StoredObject:
        try:
            audio = await self.synthesizer.synthesize(
                SpeechRequest(
                    model=self.model,
                    voice=self.voice,
                    input=script,
                    style_instruction=self.style_instruction,
                )
            )
        except Exception as e:
            logger.error("Speech synthesis failed", error=str(e))
            raise AudioSynthesisError(f"Speech synthesis failed: {e}") from e

        if not audio:
            raise AudioSynthesisError("Speech synthesis returned no audio")

        path = audio_path(user_id, self.clock())

        async def upload() -> str:
            return await self.storage.upload(
                path,
                audio,
                content_type=AUDIO_CONTENT_TYPE,
                cache_control=AUDIO_CACHE_CONTROL,
                upsert=False,
            )

        try:
            await self.retry_policy.run(upload, description="Audio upload")
        except RetryExhausted as e:
            logger.error("Audio upload failed", path=path, attempts=e.attempts)
            raise AudioUploadError(
                f"Failed to upload audio file after {e.attempts} attempts: {e.last_error}"
            ) from e.last_error

        if ledger is not None:
            ledger.record(path)

        try:
            public_url = await self.storage.get_public_url(path)
        except Exception as e:
            raise AudioUrlError(f"Public URL lookup failed: {e}") from e
        if not public_url:
            raise AudioUrlError(f"No public URL for {path}")

        logger.info("Narration audio stored", path=path, size=len(audio))
        return StoredObject(public_url=public_url, storage_path=path)
