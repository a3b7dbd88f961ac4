from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from charmline import __version__
from charmline.core.config.loader import load_app_config
from charmline.core.config.schema import AppConfig
from charmline.core.mcp.server import McpServer
from charmline.core.providers.orchestrator import GenerationOrchestrator
from charmline.core.providers.registry import ProviderRegistry
from charmline.core.runtime.retries import RetryPolicy, SleepFn
from charmline.core.telemetry.logging import configure_logging, get_logger
from charmline.core.tools.builtin.date_tools import register_date_tools
from charmline.core.tools.builtin.identity_tools import register_identity_tools
from charmline.core.tools.builtin.romance_tools import register_romance_tools
from charmline.core.tools.executor import ToolExecutor
from charmline.core.tools.registry import ToolRegistry


@dataclass(slots=True)
class ServerRuntime:
    cfg: AppConfig
    auth_token: str
    owner_number: str
    orchestrator: GenerationOrchestrator
    tool_registry: ToolRegistry
    mcp: McpServer


def build_orchestrator(
    cfg: AppConfig,
    env: Mapping[str, str] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    sleep: SleepFn | None = None,
) -> GenerationOrchestrator:
    providers = ProviderRegistry(cfg.providers, env=env).build()
    return GenerationOrchestrator(
        providers,
        retry_policy=RetryPolicy(
            max_attempts=cfg.runtime.max_retries,
            retry_delay_seconds=cfg.runtime.retry_delay_seconds,
        ),
        timeout_seconds=cfg.runtime.provider_timeout_seconds,
        deadline_seconds=cfg.runtime.generate_deadline_seconds,
        client=client,
        sleep=sleep,
    )


def build_runtime(
    config_path: str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    provider_client: httpx.AsyncClient | None = None,
    search_transport: httpx.AsyncBaseTransport | None = None,
    sleep: SleepFn | None = None,
) -> ServerRuntime:
    env = env if env is not None else os.environ
    cfg = load_app_config(instance_path=config_path)
    configure_logging(cfg.telemetry.log_level, cfg.telemetry.json_logs)
    logger = get_logger("charmline.runtime")

    auth_token = (env.get(cfg.server.auth_token_env) or "").strip()
    owner_number = (env.get(cfg.server.owner_number_env) or "").strip()
    if not auth_token or not owner_number:
        raise RuntimeError(f"Missing {cfg.server.auth_token_env} or {cfg.server.owner_number_env} env variable")

    orchestrator = build_orchestrator(cfg, env, client=provider_client, sleep=sleep)
    logger.info("providers_configured", providers=orchestrator.provider_names())

    registry = ToolRegistry()
    register_identity_tools(registry, owner_number=owner_number, orchestrator=orchestrator)
    register_romance_tools(registry, orchestrator=orchestrator)
    register_date_tools(registry, search=cfg.search, transport=search_transport)

    executor = ToolExecutor(registry=registry, logger=get_logger("charmline.tools"))
    mcp = McpServer(name=cfg.instance.name, version=__version__, registry=registry, executor=executor)
    return ServerRuntime(
        cfg=cfg,
        auth_token=auth_token,
        owner_number=owner_number,
        orchestrator=orchestrator,
        tool_registry=registry,
        mcp=mcp,
    )
