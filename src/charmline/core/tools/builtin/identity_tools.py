from __future__ import annotations

from charmline.core.providers.orchestrator import GenerationOrchestrator
from charmline.core.tools.base import ToolArgs, ToolCallContext, ToolMetadata


def render_health_report(health: dict[str, str]) -> str:
    lines = "\n".join(f"• {provider}: {status}" for provider, status in health.items())
    if not lines:
        lines = "• no remote providers configured"
    return f"🔍 **LLM Provider Health Status**\n\n{lines}\n\n📊 Total providers: {len(health)}"


def register_identity_tools(registry, *, owner_number: str, orchestrator: GenerationOrchestrator) -> None:
    async def validate(_ctx: ToolCallContext, _args: ToolArgs) -> str:
        return owner_number

    registry.register(
        ToolMetadata(
            name="validate",
            description="Returns the owner phone number in E.164-without-plus format",
            timeout_sec=5,
        ),
        validate,
    )

    async def llm_health_check(_ctx: ToolCallContext, _args: ToolArgs) -> str:
        return render_health_report(await orchestrator.check_health())

    registry.register(
        ToolMetadata(
            name="llm_health_check",
            description="Check the health status of available LLM providers",
            timeout_sec=None,
        ),
        llm_health_check,
    )
