"""
RouteLens — View Locator
=========================

What:  Finds the view file rendered by a controller action.
How:   Checks `app/views/<controller>/<action><suffix>` for each configured
       suffix in priority order (template first, then JSON builder).
Who:   Called by AnnotationResolver for every line with a matching route.
"""

import logging
from pathlib import Path
from typing import List, Optional

import aiofiles.os

from routelens.config import settings
from routelens.exceptions import ViewLookupError
from routelens.services.sources_base import ViewSource

logger = logging.getLogger(__name__)


class ViewLocator(ViewSource):
    """Filesystem-backed ViewSource."""

    def __init__(self, extensions: Optional[List[str]] = None):
        self.extensions = extensions or settings.view_extensions_list

    async def locate_view_file(self, workspace_path: str, controller: str, action: str) -> str:
        """
        Return the first existing view file, or "" when none exists.

        Example:
            app/views/posts/index.html.erb wins over
            app/views/posts/index.json.jbuilder when both exist.
        """
        base = Path(workspace_path) / "app" / "views" / controller / action

        for extension in self.extensions:
            candidate = f"{base}{extension}"
            try:
                if await aiofiles.os.path.isfile(candidate):
                    return candidate
            except (OSError, ValueError) as e:
                raise ViewLookupError(
                    message=f"Could not look up views for {controller}#{action}",
                    context={"candidate": candidate, "error": str(e)},
                )

        logger.debug("No view for %s#%s", controller, action)
        return ""


# ── Singleton Instance ────────────────────────────────────────────────────
view_locator = ViewLocator()
