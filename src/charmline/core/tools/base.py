from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


class ToolArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ToolMetadata(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_model: type[ToolArgs] = ToolArgs
    timeout_sec: float | None = 60.0

    def input_schema(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema


@dataclass(slots=True)
class ToolCallContext:
    request_id: str


@dataclass(slots=True)
class ToolResult:
    text: str
    is_error: bool = False

    def to_content(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            payload["isError"] = True
        return payload


class ToolNotFoundError(LookupError):
    pass


class ToolArgumentsError(ValueError):
    pass


ToolHandler = Callable[[ToolCallContext, Any], Awaitable[str]]
