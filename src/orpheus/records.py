"""
Artifact recorder: the pipeline's commit point.

A run is only done once the podcast row is inserted. Nothing here rolls
back storage; compensation for uploaded blobs lives in the orchestrator.
"""

from datetime import datetime
from typing import Any, Protocol

from pydantic import TypeAdapter, ValidationError

from .errors import PersistenceError
from .logging import get_logger
from .models import Artifact, GenerationRequest, StoredObject
from .storage.supabase import SupabaseConnection

logger = get_logger(__name__)

_TIMESTAMP = TypeAdapter(datetime)


class RecordStore(Protocol):
    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        ...


class SupabaseRecordStore:
    """Record store backed by a Supabase (PostgREST) table."""

    def __init__(self, connection: SupabaseConnection):
        self.connection = connection

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        client = await self.connection.get_client()
        response = await client.table(table).insert(row).execute()
        if not response.data:
            raise PersistenceError(f"Insert into {table} returned no row")
        return response.data[0]


def build_row(
    request: GenerationRequest,
    user_id: str,
    cover: StoredObject,
    audio: StoredObject,
    script: str,
) -> dict[str, Any]:
    """Combine the form metadata with the upstream outputs."""
    return {
        "title": request.title,
        "abstract": request.abstract,
        "authors": request.authors,
        "publishing_year": int(request.publishing_year),
        "field_of_research": request.field_of_research,
        "doi": request.doi or None,
        "keywords": request.keywords,
        "cover_image_url": cover.public_url,
        "audio_url": audio.public_url,
        "script": script,
        "user_id": user_id,
        "is_public": request.is_public,
    }


class ArtifactRecorder:
    def __init__(self, store: RecordStore, table: str = "podcasts"):
        self.store = store
        self.table = table

    async def record(
        self,
        request: GenerationRequest,
        user_id: str,
        cover: StoredObject,
        audio: StoredObject,
        script: str,
    ) -> Artifact:
        """Insert the podcast row and return it as an ``Artifact``.

        The row is validated before the insert. Once the insert succeeds
        nothing here raises: the stored row refers to the uploaded blobs, so
        a failure reported after it would have them deleted.

        Raises:
            PersistenceError: The row is invalid or the insert failed
        """
        row = build_row(request, user_id, cover, audio, script)
        try:
            draft = Artifact.model_validate({**row, "id": ""})
        except ValidationError as e:
            raise PersistenceError(f"Podcast row is invalid: {e}") from e

        try:
            stored = await self.store.insert(self.table, row)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error("Failed to insert podcast record", error=str(e))
            raise PersistenceError(f"Failed to save podcast: {e}") from e

        artifact = draft.model_copy(
            update={
                "id": str(stored.get("id") or ""),
                "created_at": _parse_timestamp(stored.get("created_at")),
            }
        )
        if not artifact.id:
            logger.error("Inserted podcast row came back without an id")

        logger.info("Podcast record created", artifact_id=artifact.id)
        return artifact


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return _TIMESTAMP.validate_python(value)
    except ValidationError:
        logger.warning("Inserted podcast row has an unreadable created_at", value=value)
        return None
