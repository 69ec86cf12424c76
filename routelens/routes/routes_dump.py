"""
RouteLens — Route Dump Route Handler
=====================================

What:  Handles POST /api/routes/regenerate (rebuild tmp/routes_file.txt).
How:   Runs the routes command through RouteDumpService, then drops the
       workspace's cached route sets so the next lookup reads the new dump.
Who:   Called by the editor plugin's "refresh routes" command; the save hook
       in documents.py reuses refresh_route_dump().
"""

import logging

from fastapi import APIRouter

from routelens.schemas.api import ErrorResponse, RegenerateResponse
from routelens.services.annotation_service import annotation_service, route_index
from routelens.services.route_dump_service import route_dump_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Routes"])


async def refresh_route_dump(workspace_path: str) -> RegenerateResponse:
    """
    Regenerate the dump and forget the workspace's cached routes.

    Raises:
        RouteDumpError: propagated from the regeneration.
    """
    dump_path = await route_dump_service.regenerate_route_dump(workspace_path)
    dropped = route_index.forget_workspace(workspace_path)
    return RegenerateResponse(regenerated=True, dump_path=dump_path, dropped_route_sets=dropped)


@router.post(
    "/routes/regenerate",
    response_model=RegenerateResponse,
    responses={
        200: {"description": "Route dump rewritten", "model": RegenerateResponse},
        503: {"description": "Routes command failed", "model": ErrorResponse},
    },
    summary="Regenerate the route dump",
)
async def regenerate_routes() -> RegenerateResponse:
    logger.info("Route dump regeneration requested for %s", annotation_service.workspace_path)
    return await refresh_route_dump(annotation_service.workspace_path)
