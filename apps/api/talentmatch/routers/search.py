import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request

from talentmatch.core import get_settings, limiter
from talentmatch.dependencies import get_search_service
from talentmatch.providers import EmbeddingServiceError
from talentmatch.schemas import SearchRequest, SearchResponse
from talentmatch.services.candidates import InvalidQueryError
from talentmatch.services.search import CandidateSearchService

router = APIRouter(tags=["search"])

logger = logging.getLogger(__name__)


@router.post("/search-candidates", response_model=SearchResponse)
@limiter.limit(lambda: get_settings().search_rate_limit)
async def search_candidates(
    request: Request,
    body: SearchRequest,
    service: Annotated[CandidateSearchService, Depends(get_search_service)],
) -> SearchResponse:
    """Rank candidates by semantic similarity to the query and attach an LLM analysis when available."""
    logger.info("Received search query: %s", str(body.query)[:100])
    try:
        outcome = await service.search(body.query, body.filters)
    except InvalidQueryError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except EmbeddingServiceError as e:
        logger.warning("Search embedding failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e
    except Exception as e:
        logger.exception("Error in search-candidates")
        raise HTTPException(status_code=500, detail=str(e) or "Search failed") from e

    return SearchResponse(
        candidates=outcome.candidates,
        enhanced_results=outcome.enhanced_results,
    )
