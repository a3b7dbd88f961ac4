from __future__ import annotations

import html
import re
from dataclasses import dataclass
from urllib.parse import parse_qs, quote_plus, urlparse

import httpx
from pydantic import Field

from charmline.core.config.schema import SearchConfig
from charmline.core.runtime.errors import classify_error
from charmline.core.telemetry.logging import get_logger
from charmline.core.tools.base import ToolArgs, ToolCallContext, ToolMetadata

logger = get_logger("charmline.tools.date")

_RESULT_RE = re.compile(
    r'result__a[^>]*href="([^"]+)"[^>]*>(.*?)</a>.*?result__snippet[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)
_SCRIPT_RE = re.compile(r"<script.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style.*?</style>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"</?[a-z][^>]*>", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s{2,}")

PRO_TIPS = (
    "💡 **Pro Tips:**\n"
    "• Reserve ahead for popular venues\n"
    "• Check opening hours\n"
    "• Keep indoor options for bad weather"
)


@dataclass(slots=True)
class SearchHit:
    url: str
    title: str
    snippet: str


class DateLocationArgs(ToolArgs):
    city: str = Field(description="City or locality")
    date_type: str = Field(default="romantic", description="Type of date")
    budget: str = Field(default="moderate", description="Budget: budget-friendly|moderate|upscale")


def strip_html(fragment: str) -> str:
    text = _SCRIPT_RE.sub("", fragment)
    text = _STYLE_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    return _SPACE_RE.sub(" ", text).strip()


def _resolve_url(href: str) -> str:
    """Unwrap DuckDuckGo's ``/l/?uddg=<target>`` redirect links."""
    href = html.unescape(href)
    parsed = urlparse(href)
    target = parse_qs(parsed.query).get("uddg")
    if target:
        return target[0]
    if href.startswith("//"):
        return f"https:{href}"
    return href


def parse_results(page: str, *, limit: int = 8, snippet_chars: int = 200) -> list[SearchHit]:
    hits: list[SearchHit] = []
    for match in _RESULT_RE.finditer(page):
        url, title, snippet = match.groups()
        hits.append(
            SearchHit(
                url=_resolve_url(url),
                title=strip_html(title),
                snippet=strip_html(snippet)[:snippet_chars],
            )
        )
        if len(hits) >= limit:
            break
    return hits


def render_locations(city: str, date_type: str, budget: str, hits: list[SearchHit]) -> str:
    header = f"💝 **Date Locations in {city}** 💝\n\n**Date Type:** {date_type}\n**Budget:** {budget}\n\n"
    if not hits:
        return (
            f"{header}❌ No specific spots found.\n\n"
            "• Try well-rated local cafés\n• Scenic parks\n• Art museums\n• Cozy rooftop lounges"
        )
    body = "\n".join(f"**{i}. {hit.title}**\n {hit.snippet}…\n 🔗 <{hit.url}>\n" for i, hit in enumerate(hits, start=1))
    return f"{header}{body}\n{PRO_TIPS}"


def render_search_failure(city: str, date_type: str, error: str) -> str:
    return (
        f"❌ **Error finding date locations:** {error}\n\n"
        f"💡 **General suggestions for {date_type} dates in {city}:**\n"
        "• Romantic restaurants\n• Cozy cafes\n• Scenic parks\n• Local attractions\n• Entertainment venues"
    )


def register_date_tools(
    registry,
    *,
    search: SearchConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    async def find_date_locations(ctx: ToolCallContext, args: DateLocationArgs) -> str:
        query = f"best {args.date_type} date spots {args.city} {args.budget} restaurants cafes"
        try:
            async with httpx.AsyncClient(
                timeout=search.timeout_seconds,
                follow_redirects=True,
                transport=transport,
            ) as client:
                resp = await client.get(
                    f"{search.endpoint}{quote_plus(query)}",
                    headers={"User-Agent": search.user_agent},
                )
                resp.raise_for_status()
                page = resp.text
        except httpx.HTTPError as exc:
            info = classify_error(exc, category="search", component="duckduckgo")
            logger.warning(
                "date_search_failed",
                request_id=ctx.request_id,
                kind=info.kind.value,
                retryable=info.retryable,
                http_status=info.http_status,
                error=info.message_signature,
            )
            return render_search_failure(args.city, args.date_type, f"Search failed: {exc}")

        hits = parse_results(page, limit=search.max_results, snippet_chars=search.snippet_chars)
        return render_locations(args.city, args.date_type, args.budget, hits)

    registry.register(
        ToolMetadata(
            name="find_date_locations",
            description="Suggest romantic date spots via web search",
            args_model=DateLocationArgs,
            timeout_sec=search.timeout_seconds + 5,
        ),
        find_date_locations,
    )
