from __future__ import annotations

from time import perf_counter
from typing import Any

from pydantic import ValidationError

from charmline.core.runtime.errors import compact_error_summary
from charmline.core.runtime.timeouts import run_with_timeout
from charmline.core.telemetry.tracing import TraceContext, trace_event
from charmline.core.tools.base import ToolArgumentsError, ToolCallContext, ToolNotFoundError, ToolResult
from charmline.core.tools.registry import ToolRegistry


class ToolExecutor:
    def __init__(self, registry: ToolRegistry, logger) -> None:
        self.registry = registry
        self.logger = logger

    async def execute(self, tool_name: str, ctx: ToolCallContext, args: dict[str, Any] | None) -> ToolResult:
        handler = self.registry.get_handler(tool_name)
        meta = self.registry.get_metadata(tool_name)
        trace = TraceContext(request_id=ctx.request_id, component=tool_name, phase="tool")
        if handler is None or meta is None:
            trace_event(self.logger, trace, event="tool_call", status="error", extra={"detail": "not_registered"})
            raise ToolNotFoundError(f"Tool not registered: {tool_name}")

        try:
            parsed = meta.args_model.model_validate(args or {})
        except ValidationError as exc:
            trace_event(self.logger, trace, event="tool_call", status="invalid_args", extra={"detail": str(exc)})
            raise ToolArgumentsError(f"Invalid arguments for {tool_name}: {exc}") from exc

        started = perf_counter()
        try:
            text = await run_with_timeout(handler(ctx, parsed), meta.timeout_sec)
        except Exception as exc:  # noqa: BLE001
            detail = compact_error_summary(exc)
            elapsed_ms = round((perf_counter() - started) * 1000, 3)
            trace_event(self.logger, trace, event="tool_call", status="error", extra={"detail": detail, "latency_ms": elapsed_ms})
            return ToolResult(text=f"Tool {tool_name} failed: {detail}", is_error=True)

        elapsed_ms = round((perf_counter() - started) * 1000, 3)
        trace_event(self.logger, trace, event="tool_call", status="ok", extra={"latency_ms": elapsed_ms})
        return ToolResult(text=text)
