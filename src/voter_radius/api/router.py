"""Root API router with /api/v1 prefix."""

from fastapi import APIRouter

from voter_radius.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from voter_radius.api.v1.nearby import nearby_router

    root_router = APIRouter(prefix=settings.api_v1_prefix)
    root_router.include_router(nearby_router)

    return root_router
