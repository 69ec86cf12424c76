"""
RouteLens — Annotation Service
===============================

What:  Computes and caches the route annotations of a controller document.
How:   Derives the controller from the document path, asks RouteIndex for its
       routes, scans every line for `def <action>` and, per matched line,
       asks the ViewSource for a view file. Results are cached per document
       identity until the host reports a context change.
Who:   Called by the /api/annotations route; invalidated by /api/documents/activated.

Resolution Flow:
    ┌────────────┐   ┌────────────┐   ┌──────────────┐   ┌──────────────┐
    │ Controller │──▶│ RouteIndex │──▶│ Line scan    │──▶│ View lookup  │
    │ from path  │   │ (cached)   │   │ (concurrent) │   │ per match    │
    └────────────┘   └────────────┘   └──────────────┘   └──────────────┘

    The per-line tasks share only the read-only route list. asyncio.gather
    returns results in submission order, so annotations come back in
    ascending line order regardless of which view lookup finishes first.
    Every task is awaited to completion before the first failure is re-raised.

Error Handling:
    - Non-controller documents: empty result, nothing cached
    - Path under a controller name but outside app/controllers: ControllerPathError
      (internal invariant, propagates to the caller)
    - Routes unavailable (RouteIndex already warned): empty result, nothing cached
    - Any other failure while resolving: logged, one host warning, empty result,
      nothing cached (the next request retries)
"""

import asyncio
import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from routelens.config import settings
from routelens.exceptions import ControllerPathError
from routelens.models.document import Document
from routelens.models.route import Annotation, Route
from routelens.services.notifier import HostNotifier, host_notifier
from routelens.services.route_dump_service import route_dump_service
from routelens.services.route_index import RouteIndex, find_route_for_action
from routelens.services.sources_base import ViewSource
from routelens.services.view_locator import view_locator

logger = logging.getLogger(__name__)

# `def index`, `  private def show`; class methods (`def self.x`) capture "self"
# and never match a route
ACTION_DEFINITION = re.compile(r"^\s*(?:(?:private|protected|public)\s+)?def\s+(\w+)")


class AnnotationResolver:
    """
    Per-document annotation cache in front of RouteIndex and the ViewSource.

    Args:
        route_index: Cached route lookup.
        views: Collaborator that locates view files.
        notifier: Receives the user-visible warning when resolution fails.
        workspace_path: Default workspace for documents that do not name one.
        controller_suffix: File name suffix identifying controller sources.
    """

    RESOLVE_WARNING = "An error occurred while generating route annotations."

    def __init__(
        self,
        route_index: RouteIndex,
        views: ViewSource,
        notifier: HostNotifier = host_notifier,
        workspace_path: Optional[str] = None,
        controller_suffix: Optional[str] = None,
    ):
        self.route_index = route_index
        self.views = views
        self.notifier = notifier
        self.workspace_path = workspace_path or settings.workspace_path
        self.controller_suffix = controller_suffix or settings.controller_suffix
        self._controller_pattern = re.compile(
            r"app/controllers/(.*?)" + re.escape(self.controller_suffix) + r"$"
        )
        self._cache: Dict[str, Tuple[Annotation, ...]] = {}

    # ── Path Conventions ──────────────────────────────────────────────────

    def is_controller_file(self, document: Document) -> bool:
        return document.posix_path.endswith(self.controller_suffix)

    def controller_name(self, document: Document) -> str:
        """
        Extract `admin/posts` from `.../app/controllers/admin/posts_controller.rb`.

        Raises:
            ControllerPathError if the path is not under app/controllers.
        """
        match = self._controller_pattern.search(document.posix_path)
        if match is None or not match.group(1):
            raise ControllerPathError(path=document.path)
        return match.group(1)

    # ── Resolution ────────────────────────────────────────────────────────

    async def resolve(self, document: Document) -> List[Annotation]:
        """
        Return the annotations for a document, computing them on a cache miss.

        Returns:
            Annotations in ascending line order; empty for non-controller
            documents and when resolution fails.

        Raises:
            ControllerPathError: controller-named file outside app/controllers.
        """
        if not self.is_controller_file(document):
            return []

        identity = document.identity
        cached = self._cache.get(identity)
        if cached is not None:
            return list(cached)

        controller = self.controller_name(document)
        workspace_path = document.workspace_path or self.workspace_path

        try:
            routes = await self.route_index.lookup_routes(workspace_path, controller)
            if routes is None:
                # Warned by RouteIndex; left uncached so the next request retries
                return []

            results = await asyncio.gather(
                *(
                    self._annotate_line(workspace_path, controller, routes, index, text)
                    for index, text in enumerate(document.lines)
                ),
                return_exceptions=True,
            )
            failures = [result for result in results if isinstance(result, BaseException)]
            if failures:
                raise failures[0]
        except Exception as e:
            logger.error(
                "Annotation resolution failed for %s: %s", identity, str(e), exc_info=True
            )
            self.notifier.show_warning(self.RESOLVE_WARNING)
            return []

        annotations = [annotation for annotation in results if annotation is not None]
        self._cache[identity] = tuple(annotations)
        logger.info(
            "Resolved %d annotations for %s (%d routes)",
            len(annotations),
            identity,
            len(routes),
        )
        return annotations

    async def _annotate_line(
        self,
        workspace_path: str,
        controller: str,
        routes: Sequence[Route],
        line_index: int,
        line_text: str,
    ) -> Optional[Annotation]:
        match = ACTION_DEFINITION.match(line_text)
        if match is None:
            return None

        route = find_route_for_action(routes, match.group(1), controller)
        if route is None:
            return None

        view_path = await self.views.locate_view_file(
            workspace_path, route.controller, route.action
        )
        return Annotation.for_route(
            line_index, route, view_path, controller=controller, action=match.group(1)
        )

    # ── Invalidation ──────────────────────────────────────────────────────

    def invalidate(self, identity: str) -> bool:
        """
        Forget the cached annotations of one document.

        Returns:
            True if an entry was removed.
        """
        removed = self._cache.pop(identity, None) is not None
        if removed:
            logger.debug("Invalidated annotations for %s", identity)
        return removed

    def cached(self, identity: str) -> Optional[List[Annotation]]:
        entry = self._cache.get(identity)
        return list(entry) if entry is not None else None

    def __len__(self) -> int:
        return len(self._cache)


# ── Singleton Instances ───────────────────────────────────────────────────
# Both caches live for the whole process and are shared by all requests
route_index = RouteIndex(route_dump_service)
annotation_service = AnnotationResolver(route_index, view_locator)
