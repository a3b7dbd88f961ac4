"""JSON-RPC 2.0 dispatcher for the MCP tool methods."""

from __future__ import annotations

import uuid
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from charmline.core.tools.base import ToolArgumentsError, ToolCallContext, ToolNotFoundError
from charmline.core.tools.executor import ToolExecutor
from charmline.core.tools.registry import ToolRegistry

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"]
    method: str
    params: dict[str, Any] | None = None
    id: int | str | None = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


class McpError(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def error_response(request_id: int | str | None, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class McpServer:
    def __init__(self, *, name: str, version: str, registry: ToolRegistry, executor: ToolExecutor) -> None:
        self.name = name
        self.version = version
        self.registry = registry
        self.executor = executor

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Answer one decoded JSON-RPC message; ``None`` means nothing to send back."""
        if not isinstance(message, dict):
            return error_response(None, INVALID_REQUEST, "Invalid Request: expected a single JSON-RPC object")
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as exc:
            return error_response(message.get("id"), INVALID_REQUEST, f"Invalid Request: {exc.error_count()} error(s)")

        if request.is_notification:
            return None

        try:
            result = await self._dispatch(request)
        except McpError as exc:
            return error_response(request.id, exc.code, exc.message)
        return {"jsonrpc": "2.0", "id": request.id, "result": result}

    async def _dispatch(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.params or {}
        if request.method == "initialize":
            return self._initialize(params)
        if request.method == "ping":
            return {}
        if request.method == "tools/list":
            return {"tools": self.list_tools()}
        if request.method == "tools/call":
            return await self._call_tool(params)
        raise McpError(METHOD_NOT_FOUND, f"Method not found: {request.method}")

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else SUPPORTED_PROTOCOL_VERSIONS[0]
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": self.name, "version": self.version},
        }

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {"name": meta.name, "description": meta.description, "inputSchema": meta.input_schema()}
            for meta in self.registry.list_tools()
        ]

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise McpError(INVALID_PARAMS, "tools/call requires a tool name")
        arguments = params.get("arguments") or {}
        if not isinstance(arguments, dict):
            raise McpError(INVALID_PARAMS, "tools/call arguments must be an object")

        ctx = ToolCallContext(request_id=uuid.uuid4().hex[:12])
        try:
            result = await self.executor.execute(name, ctx, arguments)
        except (ToolNotFoundError, ToolArgumentsError) as exc:
            raise McpError(INVALID_PARAMS, str(exc)) from exc
        return result.to_content()
