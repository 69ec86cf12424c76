"""
RouteLens — Route Dump Service
===============================

What:  Reads and regenerates the authoritative route dump (tmp/routes_file.txt).
How:   Regeneration runs the configured routes command inside the workspace
       (asyncio subprocess, tenacity retries) and writes the rows containing
       a "/" to the dump. Reads use aiofiles and filter the rows for one
       controller, mirroring `cat tmp/routes_file.txt | grep posts#`.
Who:   RouteIndex calls fetch_raw_route_lines() on cache misses; the host
       hooks (startup, save of config/routes.rb) call regenerate_route_dump().

Failure model:
    Both operations raise RouteDumpError. A controller with no matching rows
    is not a failure; it yields an empty string.
"""

import asyncio
import logging
import shlex
import time
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from routelens.config import settings
from routelens.exceptions import RouteDumpError
from routelens.services.sources_base import RouteSource

logger = logging.getLogger(__name__)


class RouteDumpService(RouteSource):
    """
    Filesystem and process backed RouteSource.

    The dump location is fixed per workspace: `<workspace>/<routes_dump_path>`.
    """

    def __init__(self, dump_path: Optional[str] = None, routes_command: Optional[str] = None):
        """
        Args:
            dump_path: Override the dump location relative to the workspace (tests).
            routes_command: Override the command that prints the routing table.
        """
        self.relative_dump_path = dump_path or settings.routes_dump_path
        self.routes_command = routes_command or settings.routes_command

    def dump_path(self, workspace_path: str) -> Path:
        return Path(workspace_path) / self.relative_dump_path

    async def dump_exists(self, workspace_path: str) -> bool:
        return await aiofiles.os.path.exists(self.dump_path(workspace_path))

    # ── Reading ───────────────────────────────────────────────────────────

    async def fetch_raw_route_lines(self, workspace_path: str, controller: str) -> str:
        """
        Return the dump rows mentioning `<controller>#`.

        The substring filter also keeps rows for namespaced controllers that
        end with the same name (posts# matches admin/posts#); exact matching
        happens later in find_route_for_action().

        Raises:
            RouteDumpError if the dump is missing or unreadable.
        """
        dump_path = self.dump_path(workspace_path)
        needle = f"{controller}#"

        try:
            async with aiofiles.open(dump_path, "r", encoding="utf-8", errors="replace") as f:
                content = await f.read()
        except OSError as e:
            logger.error("Failed to read route dump %s: %s", dump_path, str(e))
            raise RouteDumpError(
                message=f"Could not read route dump at {dump_path}",
                workspace_path=workspace_path,
                context={"dump_path": str(dump_path), "os_error": str(e)},
            )

        lines = [line for line in content.splitlines() if needle in line]
        logger.debug(
            "Route dump %s: %d rows for %s", dump_path.name, len(lines), controller
        )
        return "\n".join(lines)

    # ── Regeneration ──────────────────────────────────────────────────────

    async def regenerate_route_dump(self, workspace_path: str) -> str:
        """
        Run the routes command and rewrite the dump.

        Flow:
            1. Run `routes_command` in the workspace (retried on failure)
            2. Keep only rows containing "/" (drops the header and blank rows)
            3. Write the rows to the dump path, creating tmp/ when needed

        Returns:
            The dump path as a string.

        Raises:
            RouteDumpError if the command fails after all retries or the dump
            cannot be written.
        """
        start_time = time.perf_counter()
        output = await self._run_routes_command(workspace_path)

        rows = [line for line in output.splitlines() if "/" in line]
        dump_path = self.dump_path(workspace_path)

        try:
            await aiofiles.os.makedirs(dump_path.parent, exist_ok=True)
            async with aiofiles.open(dump_path, "w", encoding="utf-8") as f:
                await f.write("\n".join(rows) + "\n")
        except OSError as e:
            logger.error("Failed to write route dump %s: %s", dump_path, str(e))
            raise RouteDumpError(
                message=f"Could not write route dump at {dump_path}",
                workspace_path=workspace_path,
                context={"dump_path": str(dump_path), "os_error": str(e)},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Route dump regenerated: %s (%d rows, %.0fms)", dump_path, len(rows), duration_ms
        )
        return str(dump_path)

    async def ensure_route_dump(self, workspace_path: str) -> bool:
        """
        Regenerate the dump only if it does not exist yet (first run).

        Returns:
            True if a regeneration ran, False if the dump was already present.
        """
        if await self.dump_exists(workspace_path):
            return False
        logger.info("No route dump found in %s; generating one", workspace_path)
        await self.regenerate_route_dump(workspace_path)
        return True

    @retry(
        retry=retry_if_exception_type(RouteDumpError),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _run_routes_command(self, workspace_path: str) -> str:
        """Runs the routes command once; tenacity retries on RouteDumpError."""
        argv = shlex.split(self.routes_command)

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=workspace_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            # Command not found, workspace missing, permission denied
            logger.warning("Could not start '%s': %s", self.routes_command, str(e))
            raise RouteDumpError(
                message=f"Could not run '{self.routes_command}'",
                workspace_path=workspace_path,
                context={"command": self.routes_command, "os_error": str(e)},
            )

        if process.returncode != 0:
            error_text = stderr.decode("utf-8", errors="replace").strip()
            logger.warning(
                "'%s' exited with %d: %s",
                self.routes_command,
                process.returncode,
                error_text[-500:],
            )
            raise RouteDumpError(
                message=f"'{self.routes_command}' exited with status {process.returncode}",
                workspace_path=workspace_path,
                context={"command": self.routes_command, "returncode": process.returncode},
            )

        return stdout.decode("utf-8", errors="replace")


# ── Singleton Instance ────────────────────────────────────────────────────
route_dump_service = RouteDumpService()
