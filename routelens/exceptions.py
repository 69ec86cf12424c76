"""
RouteLens — Custom Exception Hierarchy
=======================================

What:  Defines application-specific exceptions for the route-resolution core.
How:   Each exception class carries a message and optional context dict.
       The resolution services convert route and view failures into empty
       results plus a host warning; the FastAPI handlers registered in
       main.py turn anything that escapes into structured JSON errors.
Who:   Raised by services; caught by services or global handlers.

Exception Hierarchy:
    RouteLensError (base)
    ├── ValidationError        → 400 Bad Request (host sent something unusable)
    ├── RouteDumpError         → 503 (dump missing, unreadable or not regenerable)
    ├── ViewLookupError        → 500 (view lookup failed)
    └── ControllerPathError    → 500 (internal invariant: not a controller path)
"""

from typing import Any, Dict, Optional


class RouteLensError(Exception):
    """
    Base exception for all RouteLens errors.

    Attributes:
        message:  Human-readable error description (safe to show in the editor)
        context:  Additional debug info (logged, returned only as error details)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RouteLensError):
    """
    Raised when a host request cannot be processed as sent.

    When:    Relative document path, empty path, and similar request problems.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class RouteDumpError(RouteLensError):
    """
    Raised when the authoritative route dump cannot be read or regenerated.

    When:    tmp/routes_file.txt is absent, unreadable, or `rails routes`
             exited non-zero (after retries).
    Recovery:
        RouteIndex catches this on fetch, warns the host once and returns no
        routes without caching, so the next request retries the read.
    """

    def __init__(
        self,
        message: str = "The route dump could not be read",
        workspace_path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if workspace_path:
            ctx["workspace_path"] = workspace_path
        super().__init__(message=message, context=ctx)
        self.workspace_path = workspace_path


class ViewLookupError(RouteLensError):
    """Raised when the view directory for an action cannot be inspected."""

    def __init__(
        self,
        message: str = "Could not look up the view file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ControllerPathError(RouteLensError):
    """
    Raised when a controller name cannot be derived from a document path.

    This is an internal invariant violation: callers only ask for controller
    names of documents that already follow the controller naming convention,
    so it is never converted into an empty result.
    """

    def __init__(
        self,
        path: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(
            message=f"'{path}' is not located under app/controllers",
            context=ctx,
        )
        self.path = path
