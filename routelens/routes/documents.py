"""
RouteLens — Document Route Handlers
====================================

What:  Editor-facing endpoints for annotations and document lifecycle events.
How:   Thin wrappers around AnnotationResolver and the route dump refresh.
Who:   Called by the editor plugin.

Route Inventory:
    POST /api/annotations          annotations for a document (cached)
    POST /api/documents/activated  editor switched to a document → invalidate
    POST /api/documents/saved      document saved → regenerate dump for routes.rb
"""

import logging
import os

from fastapi import APIRouter

from routelens.config import settings
from routelens.exceptions import RouteDumpError, ValidationError
from routelens.models.document import Document, document_identity
from routelens.routes.routes_dump import refresh_route_dump
from routelens.schemas.api import (
    AnnotationListResponse,
    DocumentPathRequest,
    ErrorResponse,
    InvalidateResponse,
    RegenerateResponse,
)
from routelens.services.annotation_service import annotation_service
from routelens.services.notifier import host_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Documents"])


@router.post(
    "/annotations",
    response_model=AnnotationListResponse,
    responses={
        200: {"description": "Annotations for the document", "model": AnnotationListResponse},
        400: {"description": "Relative workspace path", "model": ErrorResponse},
        500: {"description": "Document is not a resolvable controller", "model": ErrorResponse},
    },
    summary="Compute route annotations for a document",
    description=(
        "Returns one annotation per `def <action>` line that has a matching route. "
        "Results are cached per document until the document is activated again."
    ),
)
async def get_annotations(document: Document) -> AnnotationListResponse:
    if document.workspace_path is not None and not os.path.isabs(document.workspace_path):
        raise ValidationError(
            message="workspace_path must be an absolute path",
            field="workspace_path",
            context={"workspace_path": document.workspace_path},
        )

    with host_notifier.collect() as warnings:
        annotations = await annotation_service.resolve(document)

    return AnnotationListResponse(
        identity=document.identity,
        annotations=annotations,
        warnings=warnings,
    )


@router.post(
    "/documents/activated",
    response_model=InvalidateResponse,
    summary="Signal that a document became the active editor",
)
async def document_activated(request: DocumentPathRequest) -> InvalidateResponse:
    identity = document_identity(request.path)
    invalidated = annotation_service.invalidate(identity)
    return InvalidateResponse(identity=identity, invalidated=invalidated)


@router.post(
    "/documents/saved",
    response_model=RegenerateResponse,
    summary="Signal that a document was saved",
    description=(
        "Saving the routing definition file (config/routes.rb) regenerates the route dump. "
        "Failures are logged; they do not produce an error response."
    ),
)
async def document_saved(request: DocumentPathRequest) -> RegenerateResponse:
    if not request.path.endswith(settings.routing_file_suffix):
        return RegenerateResponse(regenerated=False)

    try:
        return await refresh_route_dump(annotation_service.workspace_path)
    except RouteDumpError as e:
        logger.error("Error updating routes file: %s | Context: %s", e.message, e.context)
        return RegenerateResponse(regenerated=False)
