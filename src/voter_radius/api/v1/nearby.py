"""Nearby-voter search endpoint."""

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from voter_radius.core.dependencies import get_retrieval_service
from voter_radius.lib.errors import GeocodeFailure, SearchValidationError, StoreError
from voter_radius.schemas.nearby import SearchRequest, SearchResult
from voter_radius.services.retrieval_service import RetrievalService

nearby_router = APIRouter(prefix="/nearby", tags=["nearby"])


@nearby_router.post(
    "/search",
    response_model=SearchResult,
)
async def search_nearby(
    request: SearchRequest,
    service: RetrievalService = Depends(get_retrieval_service),  # noqa: B008
) -> SearchResult:
    """Voters registered at addresses within a radius of a free-text address."""
    try:
        return await service.search(request)
    except SearchValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        ) from e
    except GeocodeFailure as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message,
        ) from e
    except StoreError as e:
        logger.error(f"Nearby search failed: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Voter data is temporarily unavailable. Please retry later.",
        ) from e
