"""Tool wrappers exposing the patch engine to tool-calling agents."""

from __future__ import annotations

from unipatch.tools.apply_patch import ApplyPatchInput, ApplyPatchOutput, ApplyPatchTool
from unipatch.tools.base import Tool, ToolRequest, ToolResponse

__all__ = ["ApplyPatchInput", "ApplyPatchOutput", "ApplyPatchTool", "Tool", "ToolRequest", "ToolResponse"]
