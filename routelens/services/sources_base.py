"""
RouteLens — Collaborator Interfaces
====================================

What:  Abstract base classes for the external collaborators the core calls.
How:   RouteIndex depends on a RouteSource; AnnotationResolver depends on a
       ViewSource. Concrete filesystem/process implementations live in
       route_dump_service.py and view_locator.py; tests substitute mocks.
"""

from abc import ABC, abstractmethod


class RouteSource(ABC):
    """
    Provider of the authoritative routing table.

    Contract:
        - fetch_raw_route_lines() never parses; it returns dump rows verbatim
        - Implementations wrap their own failures in RouteDumpError
    """

    @abstractmethod
    async def fetch_raw_route_lines(self, workspace_path: str, controller: str) -> str:
        """
        Return the rows of the route dump that mention `controller#`.

        Returns:
            Newline-separated rows; an empty string when no row matches.

        Raises:
            RouteDumpError: The dump is absent or could not be read.
        """
        ...

    @abstractmethod
    async def regenerate_route_dump(self, workspace_path: str) -> str:
        """
        Rebuild the dump for a workspace and return its path.

        Raises:
            RouteDumpError: The routes command failed after all retries.
        """
        ...


class ViewSource(ABC):
    """Locates the view file rendered by a controller action."""

    @abstractmethod
    async def locate_view_file(self, workspace_path: str, controller: str, action: str) -> str:
        """
        Return the first existing view file for the action, or "" when none exists.

        Raises:
            ViewLookupError: The view directory could not be inspected.
        """
        ...
