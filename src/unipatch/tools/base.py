"""Abstract base classes for tools that wrap the patch engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

Req = TypeVar("Req", bound=BaseModel)
Res = TypeVar("Res", bound=BaseModel)


class ToolRequest(BaseModel):
    """Base class for tool requests; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class ToolResponse(BaseModel):
    """Marker base class for tool responses."""


class Tool(Generic[Req, Res], ABC):
    """Abstract tool with typed request/response."""

    name: ClassVar[str]
    description: ClassVar[str]
    InputModel: ClassVar[type[Req]]
    OutputModel: ClassVar[type[Res]]

    @abstractmethod
    def execute(self, request: Req) -> Res:
        """Run the tool and return a response."""

    def execute_mock(self, request: Req) -> Res:
        """Preview the tool without side effects. Read-only tools just execute."""

        return self.execute(request)

    def invoke(self, payload: dict[str, Any], *, mock: bool = False) -> dict[str, Any]:
        """Validate a raw payload, run the tool and dump the response."""

        request = self.InputModel.model_validate(payload)
        response = self.execute_mock(request) if mock else self.execute(request)
        return response.model_dump()

    @classmethod
    def spec(cls) -> dict[str, Any]:
        """Function-calling spec derived from the input model's JSON schema."""

        params = cls.InputModel.model_json_schema()
        params.setdefault("additionalProperties", False)
        return {
            "type": "function",
            "function": {
                "name": cls.name,
                "description": cls.description,
                "parameters": params,
            },
        }


__all__ = ["ToolRequest", "ToolResponse", "Tool", "Req", "Res"]
