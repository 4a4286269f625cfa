"""Generation run endpoints: submit, poll, cancel."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, File, Form, Header, HTTPException, UploadFile
from pydantic import BaseModel

from ...errors import DuplicateRunError
from ...logging import get_logger
from ...models import GenerationRequest
from ...pipeline.progress import RunState
from ...pipeline.runs import RunRegistry
from ..dependencies import get_registry

logger = get_logger(__name__)
router = APIRouter()

PDF_CONTENT_TYPE = "application/pdf"


class SubmitGenerationResponse(BaseModel):
    run_id: str


@router.post("/generations", response_model=SubmitGenerationResponse, status_code=202)
async def submit_generation(
    file: UploadFile = File(...),
    title: str = Form(...),
    abstract: str = Form(""),
    authors: str = Form(""),
    publishing_year: int | None = Form(None),
    field_of_research: str = Form(""),
    keywords: str = Form(""),
    doi: str | None = Form(None),
    is_public: bool = Form(True),
    user_id: str = Header(..., alias="X-User-Id"),
    registry: RunRegistry = Depends(get_registry),
) -> SubmitGenerationResponse:
    """Start a generation run.

    Authentication happens upstream; the caller's identity arrives in the
    ``X-User-Id`` header.
    """
    if file.content_type != PDF_CONTENT_TYPE:
        raise HTTPException(status_code=400, detail="Only PDF documents are supported")

    request = GenerationRequest(
        file=await file.read(),
        title=title,
        abstract=abstract,
        authors=authors,
        publishing_year=publishing_year or datetime.now(UTC).year,
        field_of_research=field_of_research,
        keywords=keywords,
        doi=doi or None,
        is_public=is_public,
    )

    try:
        handle = registry.start(request, user_id)
    except DuplicateRunError as e:
        raise HTTPException(status_code=409, detail=e.user_message) from e

    logger.info("Generation submitted", run_id=handle.run_id, user_id=user_id)
    return SubmitGenerationResponse(run_id=handle.run_id)


@router.get("/generations/{run_id}", response_model=RunState)
async def get_generation(run_id: str, registry: RunRegistry = Depends(get_registry)) -> RunState:
    handle = registry.get(run_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return handle.tracker.state


@router.delete("/generations/{run_id}", status_code=202)
async def cancel_generation(run_id: str, registry: RunRegistry = Depends(get_registry)) -> dict:
    if registry.get(run_id) is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return {"run_id": run_id, "cancelled": registry.cancel(run_id)}
