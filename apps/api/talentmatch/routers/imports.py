import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from talentmatch.core import get_settings, limiter
from talentmatch.dependencies import get_ingestion_service
from talentmatch.schemas import ImportRequest, ImportResponse
from talentmatch.services.candidates import CandidateIngestionService

router = APIRouter(tags=["import"])

logger = logging.getLogger(__name__)


@router.post("/import-github-users", response_model=ImportResponse)
@limiter.limit(lambda: get_settings().import_rate_limit)
async def import_github_users(
    request: Request,
    body: ImportRequest,
    service: Annotated[CandidateIngestionService, Depends(get_ingestion_service)],
) -> ImportResponse:
    """Embed and store GitHub user records; existing usernames are skipped."""
    users = body.users
    if not isinstance(users, list) or not users:
        raise HTTPException(
            status_code=400,
            detail="Users array is required and must not be empty",
        )

    try:
        summary = await service.ingest(users)
    except Exception as e:
        logger.exception("Error in import-github-users")
        raise HTTPException(status_code=500, detail=str(e) or "Import failed") from e

    return ImportResponse(results=summary, message=summary.message())
