"""
RouteLens — Host Notifications
===============================

What:  Surfaces user-visible warnings to the editor host.
How:   Every warning is logged; when a request is collecting warnings (see
       `collect()`), it is also appended to that request's list so the HTTP
       layer can return it next to the result.

Concurrency:
    Several documents may be resolved concurrently on the same event loop.
    Each request sets its own list in a ContextVar; tasks spawned by
    asyncio.gather inherit the context and append to the same list object.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

host_warnings_var: ContextVar[Optional[List[str]]] = ContextVar("host_warnings", default=None)


class HostNotifier:
    """Collects warnings destined for the editor's notification area."""

    def show_warning(self, message: str) -> None:
        logger.warning("Host warning: %s", message)
        bucket = host_warnings_var.get()
        if bucket is not None:
            bucket.append(message)

    @contextmanager
    def collect(self) -> Iterator[List[str]]:
        """
        Collect warnings raised inside the block.

        Usage:
            with host_notifier.collect() as warnings:
                annotations = await annotation_service.resolve(document)
        """
        bucket: List[str] = []
        token = host_warnings_var.set(bucket)
        try:
            yield bucket
        finally:
            host_warnings_var.reset(token)


# ── Singleton Instance ────────────────────────────────────────────────────
host_notifier = HostNotifier()
