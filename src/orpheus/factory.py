"""Wires the pipeline stages to the real service clients."""

import httpx
from openai import AsyncOpenAI

from .clients.openai import OpenAIImageGenerator, OpenAILanguageModel, OpenAISpeechSynthesizer
from .clients.proxy import HttpImageProxy
from .config import Settings, settings as default_settings
from .errors import ConfigurationError
from .logging import get_logger
from .pipeline.audio import AudioProducer
from .pipeline.concepts import VisualConceptSynthesizer
from .pipeline.extraction import TextExtractor
from .pipeline.image import ImageProducer
from .pipeline.orchestrator import GenerationPipeline
from .pipeline.script import ScriptSynthesizer
from .records import ArtifactRecorder, SupabaseRecordStore
from .storage.retry import RetryPolicy, linear_backoff
from .storage.supabase import SupabaseConnection, SupabaseStorageProvider

logger = get_logger(__name__)


def create_retry_policy(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.upload_max_attempts,
        backoff=linear_backoff(settings.upload_retry_base_delay),
    )


def build_pipeline(settings: Settings | None = None) -> GenerationPipeline:
    """Create a pipeline backed by OpenAI and Supabase.

    Raises:
        ConfigurationError: If credentials or endpoints are missing
    """
    settings = settings or default_settings

    if not settings.openai_api_key:
        raise ConfigurationError("ORPHEUS_OPENAI_API_KEY is not configured")

    proxy_url = settings.resolved_proxy_url()
    if not proxy_url:
        raise ConfigurationError("No image proxy URL could be derived; set ORPHEUS_IMAGE_PROXY_URL")

    # Only override the client defaults when a timeout is configured
    timeout_kwargs = {} if settings.http_timeout is None else {"timeout": settings.http_timeout}
    openai_client = AsyncOpenAI(api_key=settings.openai_api_key, **timeout_kwargs)
    http_client = httpx.AsyncClient(**timeout_kwargs)

    connection = SupabaseConnection(settings.supabase_url, settings.supabase_key)
    storage = SupabaseStorageProvider(connection, settings.storage_bucket, http_client=http_client)
    retry_policy = create_retry_policy(settings)
    llm = OpenAILanguageModel(openai_client)
    # Owns http_client, which storage shares
    proxy = HttpImageProxy(proxy_url, api_key=settings.supabase_key, http_client=http_client)

    pipeline = GenerationPipeline(
        extractor=TextExtractor(),
        concepts=VisualConceptSynthesizer(
            llm,
            model=settings.text_model,
            concept_max_tokens=settings.concept_max_tokens,
            prompt_max_tokens=settings.prompt_max_tokens,
        ),
        images=ImageProducer(
            OpenAIImageGenerator(openai_client),
            proxy,
            storage,
            retry_policy,
            model=settings.image_model,
            size=settings.image_size,
            quality=settings.image_quality,
            style=settings.image_style,
        ),
        scripts=ScriptSynthesizer(
            llm,
            model=settings.text_model,
            max_chars=settings.script_max_chars,
            max_output_tokens=settings.script_max_tokens,
        ),
        audio=AudioProducer(
            OpenAISpeechSynthesizer(openai_client),
            storage,
            retry_policy,
            model=settings.speech_model,
            voice=settings.speech_voice,
            style_instruction=settings.speech_instructions,
        ),
        recorder=ArtifactRecorder(SupabaseRecordStore(connection), table=settings.artifacts_table),
        storage=storage,
        closers=[proxy.aclose, openai_client.close],
    )
    logger.info(
        "Pipeline configured",
        text_model=settings.text_model,
        image_model=settings.image_model,
        speech_model=settings.speech_model,
        bucket=settings.storage_bucket,
    )
    return pipeline
