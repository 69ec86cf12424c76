"""
RouteLens — Document Snapshot
==============================

What:  The editor document as the host sends it: location plus current text.
How:   `identity` is derived from the location only (file URI), so edits to
       the text do not change which cache entry a document maps to.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


def document_identity(path: str) -> str:
    """Stable cache identity for a document path (its file:// URI)."""
    return Path(path).absolute().as_uri()


class Document(BaseModel):
    path: str = Field(min_length=1, description="Filesystem path of the document")
    text: str = Field(default="", description="Current document contents")
    workspace_path: Optional[str] = Field(
        default=None,
        description="Workspace the document belongs to; defaults to the configured root",
    )

    model_config = {"frozen": True}

    @property
    def identity(self) -> str:
        return document_identity(self.path)

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n")

    @property
    def posix_path(self) -> str:
        return self.path.replace("\\", "/")
