"""FastAPI dependency injection for the retrieval service."""

from fastapi import HTTPException, Request, status

from voter_radius.services.retrieval_service import RetrievalService


def get_retrieval_service(request: Request) -> RetrievalService:
    """Return the retrieval service built during application startup.

    Raises:
        HTTPException: 503 if the application has not finished starting.
    """
    service = getattr(request.app.state, "retrieval_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Retrieval service is not initialized.",
        )
    return service
