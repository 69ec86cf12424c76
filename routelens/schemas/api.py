"""
RouteLens — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the HTTP contract between the editor plugin
       and the RouteLens service.
How:   FastAPI validates request bodies against these models and serializes
       responses from them (also generating the OpenAPI docs).
Who:   Used by route handlers as request bodies and return types.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from routelens.models.route import Annotation


# ══════════════════════════════════════════════════════════════════════════
# Request Models: What the editor host sends
# ══════════════════════════════════════════════════════════════════════════


class DocumentPathRequest(BaseModel):
    """
    What:  Identifies a document by path only.
    Who:   Sent by the host on editor switches and saves.
    """
    path: str = Field(min_length=1, description="Filesystem path of the document")


# ══════════════════════════════════════════════════════════════════════════
# Response Models: What the service returns
# ══════════════════════════════════════════════════════════════════════════


class AnnotationListResponse(BaseModel):
    """
    What:  Annotations for one document plus any warnings raised while
           computing them.
    Who:   Returned by POST /api/annotations.

    The host is expected to show `warnings` in its notification area; an
    empty annotation list with a warning means resolution failed and will
    be retried on the next request.
    """
    identity: str = Field(description="Cache identity of the document")
    annotations: List[Annotation] = Field(description="Annotations in ascending line order")
    warnings: List[str] = Field(default_factory=list, description="User-visible warnings")


class InvalidateResponse(BaseModel):
    identity: str = Field(description="Cache identity of the document")
    invalidated: bool = Field(description="Whether a cached entry was dropped")


class RegenerateResponse(BaseModel):
    """
    What:  Outcome of a route dump regeneration.
    Who:   Returned by POST /api/routes/regenerate and POST /api/documents/saved.
    """
    regenerated: bool = Field(description="Whether the dump was rewritten")
    dump_path: Optional[str] = Field(default=None, description="Location of the dump")
    dropped_route_sets: int = Field(default=0, description="Cached route sets forgotten")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models: Consistent error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "route_dump_error",
            "message": "'bin/rails routes' exited with status 1",
            "details": {"command": "bin/rails routes", "returncode": 1},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Service status for the editor plugin's status bar and probes.
    Who:   Returned by GET /health.
    """
    status: str = Field(description="Overall status: healthy, degraded")
    version: str = Field(description="Application version")
    workspace: str = Field(description="Configured workspace root")
    route_dump: str = Field(description="Route dump state: present, missing")
    cached_route_sets: int = Field(description="Entries in the route cache")
    cached_documents: int = Field(description="Entries in the annotation cache")
    uptime_seconds: float = Field(description="Seconds since service started")
