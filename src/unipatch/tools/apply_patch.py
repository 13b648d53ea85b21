"""``apply_patch`` tool: typed wrapper around the patch engine."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field

from unipatch.fs import FsBoundary
from unipatch.patch.engine import ApplyResult, apply_patch
from unipatch.tools.base import Tool, ToolRequest, ToolResponse


class ApplyPatchInput(ToolRequest):
    patch: str = Field(min_length=1, description="Unified diff format patch content.")
    dry_run: bool = Field(default=False, description="Test patch without applying.")
    reverse: bool = Field(default=False, description="Apply patch in reverse.")


class ApplyPatchOutput(ToolResponse):
    success: bool = Field(description="True when no hunk failed.")
    files_modified: list[str] = Field(description="Files touched, relative to the work directory.")
    hunks_applied: int = Field(ge=0, description="Hunks that applied cleanly.")
    hunks_failed: int = Field(ge=0, description="Hunks that failed, including whole-file failures.")
    errors: list[str] = Field(description="Error messages in the order they occurred.")

    @classmethod
    def from_result(cls, result: ApplyResult) -> ApplyPatchOutput:
        return cls.model_validate(result.to_dict())


class ApplyPatchTool(Tool[ApplyPatchInput, ApplyPatchOutput]):
    name = "apply_patch"
    description = (
        "Apply a unified diff patch to one or more files. Supports dry-run mode to test patches "
        "and reverse mode to unapply patches."
    )
    InputModel = ApplyPatchInput
    OutputModel = ApplyPatchOutput

    def __init__(
        self,
        boundary: FsBoundary,
        *,
        encoding: str = "utf-8",
        logger: logging.Logger | None = None,
    ) -> None:
        self.boundary = boundary
        self.encoding = encoding
        self.logger = logger

    @property
    def root(self) -> Path:
        return self.boundary.root

    def execute(self, request: ApplyPatchInput) -> ApplyPatchOutput:
        result = apply_patch(
            request.patch,
            self.root,
            dry_run=request.dry_run,
            reverse=request.reverse,
            encoding=self.encoding,
            logger=self.logger,
        )
        return ApplyPatchOutput.from_result(result)

    def execute_mock(self, request: ApplyPatchInput) -> ApplyPatchOutput:
        return self.execute(request.model_copy(update={"dry_run": True}))


__all__ = ["ApplyPatchInput", "ApplyPatchOutput", "ApplyPatchTool"]
