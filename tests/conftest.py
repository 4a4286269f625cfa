"""
Shared pytest fixtures and fakes for the pipeline tests.
"""

import io
import itertools
from types import SimpleNamespace
from typing import Any

import pytest
from pypdf import PdfWriter

from orpheus.clients.base import CompletionRequest, ImageRequest, SpeechRequest
from orpheus.models import GenerationRequest
from orpheus.pipeline import prompts
from orpheus.pipeline.audio import AudioProducer
from orpheus.pipeline.concepts import VisualConceptSynthesizer
from orpheus.pipeline.extraction import TextExtractor
from orpheus.pipeline.image import ImageProducer
from orpheus.pipeline.orchestrator import GenerationPipeline
from orpheus.pipeline.script import ScriptSynthesizer
from orpheus.records import ArtifactRecorder
from orpheus.storage.base import StorageException, StorageProvider
from orpheus.storage.retry import RetryPolicy, linear_backoff

SUPABASE_URL = "https://project.supabase.co"
BUCKET = "podcasts"
DEFAULT_SCRIPT = "Welcome to a new episode of Orpheus! " + "Today we look at a study. " * 200


def make_pdf(page_count: int) -> bytes:
    """Build a PDF with ``page_count`` blank pages (no text layer)."""
    writer = PdfWriter()
    for _ in range(page_count):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeLanguageModel:
    """Answers by system instruction and records every request."""

    def __init__(
        self,
        concepts: str | Exception = "a microscope, glowing cells, a lab bench",
        brief: str | Exception = "Digital illustration of a microscope over glowing cells.",
        script: str | Exception = DEFAULT_SCRIPT,
    ):
        self.responses = {
            prompts.CONCEPTS_SYSTEM: concepts,
            prompts.IMAGE_BRIEF_SYSTEM: brief,
            prompts.SCRIPT_SYSTEM: script,
        }
        self.requests: list[CompletionRequest] = []

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        response = self.responses[request.system_instruction]
        if isinstance(response, Exception):
            raise response
        return response

    def requests_for(self, system_instruction: str) -> list[CompletionRequest]:
        return [r for r in self.requests if r.system_instruction == system_instruction]


class FakeImageGenerator:
    def __init__(self, urls: list[str] | None = None):
        self.urls = ["https://images.example.com/tmp/cover.png"] if urls is None else urls
        self.requests: list[ImageRequest] = []

    async def generate(self, request: ImageRequest) -> list[str]:
        self.requests.append(request)
        return list(self.urls)


class FakeImageProxy:
    def __init__(self, content: bytes = b"\x89PNG fake image"):
        self.content = content
        self.fetched: list[str] = []

    async def fetch(self, image_url: str) -> bytes:
        self.fetched.append(image_url)
        return self.content


class FakeSpeechSynthesizer:
    def __init__(self, audio: bytes = b"ID3 fake mp3"):
        self.audio = audio
        self.requests: list[SpeechRequest] = []

    async def synthesize(self, request: SpeechRequest) -> bytes:
        self.requests.append(request)
        return self.audio


class FakeStorage(StorageProvider):
    """In-memory bucket that can fail a configurable number of uploads."""

    bucket = BUCKET

    def __init__(self, fail_uploads: int = 0, reachable: bool = True):
        self.fail_uploads = fail_uploads
        self.reachable = reachable
        self.upload_attempts: list[dict[str, Any]] = []
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.upload_errors: list[StorageException] = []
        self.public_url_override: str | None | bool = False

    async def upload(self, path, content, content_type, cache_control=None, upsert=False):
        self.upload_attempts.append(
            {
                "path": path,
                "content_type": content_type,
                "cache_control": cache_control,
                "upsert": upsert,
            }
        )
        if self.fail_uploads > 0:
            self.fail_uploads -= 1
            error = StorageException(f"upload failure #{len(self.upload_errors) + 1}")
            self.upload_errors.append(error)
            raise error
        self.objects[path] = content
        return path

    def public_url(self, path):
        return f"{SUPABASE_URL}/storage/v1/object/public/{self.bucket}/{path}"

    async def get_public_url(self, path):
        if self.public_url_override is not False:
            return self.public_url_override
        return self.public_url(path)

    async def exists(self, url):
        return self.reachable

    async def delete(self, paths):
        self.deleted.extend(paths)
        for path in paths:
            self.objects.pop(path, None)
        return True


class FakeRecordStore:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.rows: list[tuple[str, dict[str, Any]]] = []
        self._ids = itertools.count(1)

    async def insert(self, table, row):
        if self.error is not None:
            raise self.error
        self.rows.append((table, row))
        return {**row, "id": f"podcast-{next(self._ids)}", "created_at": "2026-01-01T00:00:00Z"}


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def counter_clock(start: int = 1_700_000_000_000):
    counter = itertools.count(start)
    return lambda: next(counter)


def counter_tokens():
    counter = itertools.count(1)
    return lambda: f"tok{next(counter):04d}"


@pytest.fixture
def generation_request() -> GenerationRequest:
    return GenerationRequest(
        file=make_pdf(3),
        title="Cell Imaging at Scale",
        abstract="We image millions of cells.",
        authors="Ada Lovelace",
        publishing_year=2024,
        field_of_research="Biology",
        keywords="microscopy, cells",
        doi="10.1000/xyz123",
        is_public=True,
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry_policy(sleep) -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff=linear_backoff(1.0), sleep=sleep)


@pytest.fixture
def services():
    """Fresh fakes for every external service."""
    return SimpleNamespace(
        llm=FakeLanguageModel(),
        images=FakeImageGenerator(),
        proxy=FakeImageProxy(),
        speech=FakeSpeechSynthesizer(),
        storage=FakeStorage(),
        records=FakeRecordStore(),
    )


def build_pipeline(services, retry_policy) -> GenerationPipeline:
    return GenerationPipeline(
        extractor=TextExtractor(),
        concepts=VisualConceptSynthesizer(services.llm, model="text-model"),
        images=ImageProducer(
            services.images,
            services.proxy,
            services.storage,
            retry_policy,
            clock=counter_clock(),
            token_factory=counter_tokens(),
        ),
        scripts=ScriptSynthesizer(services.llm, model="text-model", max_chars=8000),
        audio=AudioProducer(
            services.speech,
            services.storage,
            retry_policy,
            style_instruction="Speak clearly.",
            clock=counter_clock(1_800_000_000_000),
        ),
        recorder=ArtifactRecorder(services.records, table="podcasts"),
        storage=services.storage,
    )


@pytest.fixture
def pipeline(services, retry_policy) -> GenerationPipeline:
    return build_pipeline(services, retry_policy)
