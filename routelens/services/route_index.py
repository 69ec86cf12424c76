"""
RouteLens — Route Index
========================

What:  Per-(workspace, controller) cache of parsed routes.
How:   Key is "<workspace_path>:<controller>". On a miss the RouteSource is
       asked for the controller's dump rows, which are parsed and stored;
       hits are served from memory without awaiting anything.
Who:   Called by AnnotationResolver once per document resolution.

Cache semantics:
    - Entries are stored as tuples and replaced wholesale, never mutated
    - No eviction: the working set is bounded by the controllers opened
    - Failed fetches are not cached; the next call retries the read.
      lookup_routes() reports them as None so dependent caches skip them too
    - Concurrent misses for the same key are not de-duplicated; both
      fetch and the last one to finish wins
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from routelens.exceptions import RouteDumpError
from routelens.models.route import Route
from routelens.services.notifier import HostNotifier, host_notifier
from routelens.services.route_parser import RouteTableParser
from routelens.services.sources_base import RouteSource

logger = logging.getLogger(__name__)


def find_route_for_action(
    routes: Sequence[Route], action: str, controller: str
) -> Optional[Route]:
    """First route whose controller and action equal the inputs, ignoring case."""
    for route in routes:
        if route.matches(controller, action):
            return route
    return None


class RouteIndex:
    """
    Caches parsed routes per workspace and controller.

    Args:
        source: Collaborator that reads raw dump rows.
        notifier: Receives the user-visible warning when a fetch fails.
    """

    FETCH_WARNING = "An error occurred while retrieving routes information."

    def __init__(self, source: RouteSource, notifier: HostNotifier = host_notifier):
        self.source = source
        self.notifier = notifier
        self._cache: Dict[str, Tuple[Route, ...]] = {}

    @staticmethod
    def cache_key(workspace_path: str, controller: str) -> str:
        return f"{workspace_path}:{controller}"

    async def get_routes(self, workspace_path: str, controller: str) -> List[Route]:
        """
        Return the routes for a controller, fetching and parsing on a miss.

        Never raises for fetch failures: the error is logged, reported to the
        host once, and turned into an empty list that is not cached.
        """
        routes = await self.lookup_routes(workspace_path, controller)
        return routes if routes is not None else []

    async def lookup_routes(self, workspace_path: str, controller: str) -> Optional[List[Route]]:
        """
        Same as get_routes(), but a failed fetch returns None instead of [].

        Callers that cache derived results use this to tell "no routes" from
        "routes unavailable" and skip caching the latter.
        """
        key = self.cache_key(workspace_path, controller)

        cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        try:
            raw = await self.source.fetch_raw_route_lines(workspace_path, controller)
        except RouteDumpError as e:
            logger.error(
                "Route fetch failed for %s: %s | Context: %s", key, e.message, e.context
            )
            self.notifier.show_warning(self.FETCH_WARNING)
            return None
        except Exception as e:
            # Third-party sources may raise anything; same outcome as a dump error
            logger.error("Unexpected route fetch error for %s: %s", key, str(e), exc_info=True)
            self.notifier.show_warning(self.FETCH_WARNING)
            return None

        routes = RouteTableParser.parse(raw)
        self._cache[key] = tuple(routes)
        logger.info("Cached %d routes for %s", len(routes), key)
        return routes

    def forget_workspace(self, workspace_path: str) -> int:
        """
        Drop every entry of a workspace (after the dump was regenerated).

        Returns:
            Number of entries removed.
        """
        prefix = f"{workspace_path}:"
        stale = [key for key in self._cache if key.startswith(prefix)]
        for key in stale:
            del self._cache[key]
        if stale:
            logger.info("Dropped %d cached route sets for %s", len(stale), workspace_path)
        return len(stale)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache
