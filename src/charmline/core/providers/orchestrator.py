from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from charmline.core.providers.base import (
    FALLBACK_MODEL,
    FALLBACK_PROVIDER,
    GenerationContext,
    GenerationResult,
    PayloadStyle,
    ProviderDescriptor,
    ProviderOutcome,
)
from charmline.core.providers.fallback import LocalFallback
from charmline.core.providers.styles import style_for
from charmline.core.runtime.errors import (
    ConfigurationError,
    FailureKind,
    classify_exception,
    classify_status,
    compact_error_summary,
)
from charmline.core.runtime.retries import RetryPolicy, SleepFn, run_with_retry
from charmline.core.runtime.timeouts import run_with_timeout
from charmline.core.telemetry.logging import get_logger
from charmline.core.telemetry.tracing import TraceContext, trace_event

HEALTH_PROMPT = "Test"


class GenerationOrchestrator:
    """Walks the provider chain in order and returns the first non-empty generation.

    Every provider gets ``retry_policy.max_attempts`` tries for transient
    failures (429, timeouts, transport errors, 5xx); anything else skips to the
    next provider at once. When the chain is exhausted the local fallback
    answers, so ``generate`` only raises for malformed input.
    """

    def __init__(
        self,
        providers: Sequence[ProviderDescriptor],
        *,
        retry_policy: RetryPolicy | None = None,
        timeout_seconds: float = 30.0,
        deadline_seconds: float | None = None,
        fallback: LocalFallback | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: SleepFn | None = None,
        logger=None,
    ) -> None:
        self.providers = tuple(providers)
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout_seconds = timeout_seconds
        self.deadline_seconds = deadline_seconds
        self.fallback = fallback or LocalFallback()
        self.logger = logger or get_logger("charmline.providers")
        self._client = client
        self._sleep = sleep

    def provider_names(self) -> list[str]:
        return [p.name for p in self.providers]

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            yield client

    async def generate(
        self,
        prompt: str,
        context: GenerationContext | Mapping[str, Any] | None = None,
    ) -> GenerationResult:
        if not isinstance(prompt, str):
            raise ValueError("prompt must be a string")
        ctx = GenerationContext.coerce(context)
        request_id = uuid.uuid4().hex[:12]

        if not self.providers:
            return self._fallback_result(prompt, ctx, request_id, reason="no_providers")

        try:
            result = await run_with_timeout(self._run_chain(prompt, ctx, request_id), self.deadline_seconds)
        except TimeoutError:
            self.logger.warning("generate_deadline_exceeded", request_id=request_id, deadline_seconds=self.deadline_seconds)
            return self._fallback_result(prompt, ctx, request_id, reason="deadline")
        if result is None:
            return self._fallback_result(prompt, ctx, request_id, reason="all_providers_failed")
        return result

    async def _run_chain(self, prompt: str, ctx: GenerationContext, request_id: str) -> GenerationResult | None:
        async with self._http() as client:
            for descriptor in self.providers:
                try:
                    outcome = await self.call_provider(descriptor, prompt, ctx, client=client, request_id=request_id)
                except Exception as exc:  # noqa: BLE001
                    self.logger.error(
                        "provider_unexpected_error",
                        provider=descriptor.name,
                        request_id=request_id,
                        error=compact_error_summary(exc),
                        exc_info=True,
                    )
                    continue
                trace = TraceContext(request_id=request_id, component=descriptor.name, phase="generate")
                if outcome.ok:
                    trace_event(self.logger, trace, event="provider_call", status="ok", extra={"attempts": outcome.attempts})
                    return GenerationResult(text=outcome.text, provider=descriptor.name, model=descriptor.model)
                trace_event(
                    self.logger,
                    trace,
                    event="provider_call",
                    status="failed",
                    extra={
                        "attempts": outcome.attempts,
                        "failure": outcome.failure.value if outcome.failure else None,
                        "http_status": outcome.http_status,
                        "detail": outcome.detail,
                    },
                )
        return None

    async def call_provider(
        self,
        descriptor: ProviderDescriptor,
        prompt: str,
        ctx: GenerationContext,
        *,
        client: httpx.AsyncClient,
        request_id: str = "",
    ) -> ProviderOutcome:
        try:
            style = style_for(descriptor.name)
            payload = style.build_payload(descriptor, prompt, ctx)
        except ConfigurationError as exc:
            self.logger.error("provider_misconfigured", provider=descriptor.name, request_id=request_id, error=str(exc), exc_info=True)
            return ProviderOutcome(provider=descriptor.name, failure=classify_exception(exc), detail=str(exc))

        def _on_attempt(attempt: int, outcome: ProviderOutcome) -> None:
            outcome.attempts = attempt
            if outcome.retryable and attempt < self.retry_policy.max_attempts:
                self.logger.info(
                    "provider_retry",
                    provider=descriptor.name,
                    request_id=request_id,
                    attempt=attempt,
                    failure=outcome.failure.value,
                    backoff_seconds=self.retry_policy.delay_for(attempt),
                )

        return await run_with_retry(
            lambda attempt: self._attempt(client, descriptor, style, payload, prompt),
            policy=self.retry_policy,
            should_retry=lambda outcome: outcome.retryable,
            on_attempt=_on_attempt,
            sleep=self._sleep,
        )

    async def _attempt(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        style: PayloadStyle,
        payload: dict[str, Any],
        prompt: str,
    ) -> ProviderOutcome:
        try:
            response = await run_with_timeout(
                client.post(
                    descriptor.endpoint,
                    headers=dict(descriptor.headers),
                    json=payload,
                    timeout=self.timeout_seconds,
                ),
                self.timeout_seconds,
            )
        except TimeoutError as exc:
            return ProviderOutcome(
                provider=descriptor.name,
                failure=classify_exception(exc),
                detail=f"attempt exceeded {self.timeout_seconds}s",
            )
        except httpx.RequestError as exc:
            return ProviderOutcome(provider=descriptor.name, failure=classify_exception(exc), detail=str(exc) or exc.__class__.__name__)

        failure = classify_status(response.status_code)
        if failure is not None:
            return ProviderOutcome(
                provider=descriptor.name,
                failure=failure,
                http_status=response.status_code,
                detail=f"HTTP {response.status_code}: {response.reason_phrase}",
            )

        try:
            text = style.extract_text(response.json(), prompt)
        except ValueError as exc:
            return ProviderOutcome(
                provider=descriptor.name,
                failure=classify_exception(exc),
                http_status=response.status_code,
                detail=str(exc),
            )
        if not text.strip():
            return ProviderOutcome(provider=descriptor.name, failure=FailureKind.EMPTY, http_status=response.status_code)
        return ProviderOutcome(provider=descriptor.name, text=text, http_status=response.status_code)

    def _fallback_result(self, prompt: str, ctx: GenerationContext, request_id: str, *, reason: str) -> GenerationResult:
        self.logger.info("generation_fallback", request_id=request_id, reason=reason, kind=ctx.kind)
        return GenerationResult(text=self.fallback.render(prompt, ctx), provider=FALLBACK_PROVIDER, model=FALLBACK_MODEL)

    async def check_health(self) -> dict[str, str]:
        ctx = GenerationContext(max_tokens=1)
        results: dict[str, str] = {}
        async with self._http() as client:
            for descriptor in self.providers:
                try:
                    outcome = await self.call_provider(descriptor, HEALTH_PROMPT, ctx, client=client, request_id="health")
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("provider_health_error", provider=descriptor.name, error=compact_error_summary(exc))
                    results[descriptor.name] = "unhealthy"
                    continue
                results[descriptor.name] = "healthy" if outcome.reachable else "unhealthy"
        return results
