from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

_TRACE_EVENTS: deque[dict[str, Any]] = deque(maxlen=500)


@dataclass(slots=True)
class TraceContext:
    request_id: str
    component: str
    phase: str


def trace_event(logger, ctx: TraceContext, event: str, status: str, extra: dict[str, Any] | None = None) -> None:
    payload = {
        "request_id": ctx.request_id,
        "component": ctx.component,
        "phase": ctx.phase,
        "status": status,
    }
    if extra:
        payload.update(extra)
    _TRACE_EVENTS.append({"event": event, **payload})
    logger.info(event, **payload)


def recent_traces(request_id: str | None = None, limit: int = 20) -> list[dict[str, Any]]:
    items = list(_TRACE_EVENTS)
    if request_id is not None:
        items = [i for i in items if i.get("request_id") == request_id]
    return items[-limit:]
