"""
RouteLens — Health Check Route
===============================

What:  Health check endpoint for the editor plugin and process supervisors.
How:   Reports whether the route dump exists and how large both caches are.

Status levels:
    - healthy:   Route dump present
    - degraded:  Route dump missing (annotations will be empty until regenerated)
"""

import logging
import time

from fastapi import APIRouter

from routelens import __version__
from routelens.schemas.api import HealthResponse
from routelens.services.annotation_service import annotation_service, route_index
from routelens.services.route_dump_service import route_dump_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    workspace = annotation_service.workspace_path
    dump_status = "present"
    overall = "healthy"

    if not await route_dump_service.dump_exists(workspace):
        dump_status = "missing"
        overall = "degraded"
        logger.warning("Health check: no route dump in %s", workspace)

    return HealthResponse(
        status=overall,
        version=__version__,
        workspace=workspace,
        route_dump=dump_status,
        cached_route_sets=len(route_index),
        cached_documents=len(annotation_service),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
