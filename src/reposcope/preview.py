"""Structured preview requests.

A preview is requested with a small JSON document rather than a templated
shell command. The document travels base64-encoded so it can be passed as a
single argument to whatever renders the preview.
"""

import base64
import binascii
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from .errors import InvalidPreviewRequestError
from .external.results import ContentResult, SearchResult


class PreviewRequest(BaseModel):
    """What to preview and where."""

    type: Literal["file", "content", "commit"] = Field(description="Preview kind")
    path: str = Field(default="", description="Absolute path of the file")
    repo_path: str = Field(default="", description="Repository root")
    line_number: int = Field(default=0, ge=0, description="Line to focus (content)")
    commit_hash: str = Field(default="", description="Commit to show (commit)")

    def encode(self) -> str:
        """Return the request as base64-encoded JSON."""
        return base64.b64encode(self.model_dump_json().encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, encoded: str) -> "PreviewRequest":
        """Parse a request produced by ``encode``.

        Raises:
            InvalidPreviewRequestError: If the input is not valid base64 or
                does not describe a valid request
        """
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidPreviewRequestError(f"invalid base64 input: {e}") from e

        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise InvalidPreviewRequestError(f"invalid preview request: {e}") from e


def repository_root(result: SearchResult) -> str:
    """Repository root of a result, derived from its absolute and relative paths."""
    relative = Path(result.relative_path)
    full_path = Path(result.full_path)
    # Paths reported outside the repository are kept absolute
    if (
        not relative.parts
        or relative.is_absolute()
        or len(full_path.parts) <= len(relative.parts)
    ):
        return ""
    return str(full_path.parents[len(relative.parts) - 1])


def build_preview_request(result: SearchResult) -> PreviewRequest:
    """Build the preview request for a selected result."""
    if isinstance(result, ContentResult):
        return PreviewRequest(
            type="content",
            path=result.full_path,
            repo_path=repository_root(result),
            line_number=result.line_number,
        )
    return PreviewRequest(
        type="file", path=result.full_path, repo_path=repository_root(result)
    )
