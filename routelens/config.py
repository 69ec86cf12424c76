"""
RouteLens — Application Configuration
======================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before the app starts.
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for a Rails project checked out in
    the current working directory. Attributes are grouped by concern.
    """

    # ── Workspace ─────────────────────────────────────────────────────────
    # What: Root of the Rails application being annotated
    # Only one workspace is served per process
    workspace_root: str = Field(default=".")

    # What: Location of the authoritative route dump, relative to the workspace
    routes_dump_path: str = Field(default="tmp/routes_file.txt")

    # What: Command that prints the routing table (run inside the workspace)
    routes_command: str = Field(default="bin/rails routes")

    # What: Regenerate the dump at startup when it does not exist yet
    regenerate_on_startup: bool = Field(default=True)

    # ── Naming Conventions ────────────────────────────────────────────────
    controller_suffix: str = Field(default="_controller.rb")
    routing_file_suffix: str = Field(default="routes.rb")

    # What: View file suffixes tried in order (first existing file wins)
    # Format: Comma-separated (parsed by the property below)
    view_extensions: str = Field(default=".html.erb,.json.jbuilder")

    @property
    def view_extensions_list(self) -> List[str]:
        """Splits comma-separated view suffixes into an ordered list."""
        return [ext.strip() for ext in self.view_extensions.split(",") if ext.strip()]

    @property
    def workspace_path(self) -> str:
        """Absolute workspace root as a string."""
        return str(Path(self.workspace_root).resolve())

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="127.0.0.1")
    backend_port: int = Field(default=8765, ge=1024, le=65535)

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Retry Configuration ───────────────────────────────────────────────
    # What: Tenacity retry settings for regenerating the route dump
    # `rails routes` can fail transiently while the app is booting (spring, bootsnap)
    retry_max_attempts: int = Field(default=2, ge=1, le=10)
    retry_min_wait: int = Field(default=1, ge=1, le=30)
    retry_max_wait: int = Field(default=5, ge=1, le=120)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # WORKSPACE_ROOT and workspace_root both work
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the workspace looks like a Rails application.
        When:  Called during app startup (lifespan).
        How:   Checks for the controllers directory and raises ValueError with guidance.
        """
        errors = []
        root = Path(self.workspace_root)
        if not root.is_dir():
            errors.append(f"WORKSPACE_ROOT '{self.workspace_root}' is not a directory.")
        elif not (root / "app" / "controllers").is_dir():
            errors.append(
                f"WORKSPACE_ROOT '{self.workspace_root}' has no app/controllers directory. "
                "Point it at the root of a Rails application."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
