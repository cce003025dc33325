"""Web search tool backed by Exa's search-and-contents API."""

from typing import Any

import httpx
from langchain_core.tools import BaseTool, tool
from pydantic import BaseModel, Field

from slackbot.services.status import StatusReporter
from slackbot.tools.base import ToolExecutionError, source_metadata
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

SEARCH_URL = "https://api.exa.ai/search"
MAX_RESULTS = 3
MAX_SNIPPET_CHARS = 1000


class WebSearchInput(BaseModel):
    """Input schema for the web search tool."""

    query: str = Field(..., min_length=1, description="What to search for")
    specific_domain: str | None = Field(
        None,
        description="Restrict results to this domain, e.g. 'docs.python.org'",
    )


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str


class SearchResults(BaseModel):
    """Web search tool result."""

    results: list[SearchResult]


def build_search_request(query: str, specific_domain: str | None) -> dict[str, Any]:
    """Request body asking for freshly crawled page text."""
    body: dict[str, Any] = {
        "query": query,
        "numResults": MAX_RESULTS,
        "contents": {"text": True, "livecrawl": "always"},
    }
    if specific_domain:
        body["includeDomains"] = [specific_domain]
    return body


def parse_search_results(payload: dict[str, Any]) -> SearchResults:
    """Keep at most three results, each with a snippet of at most 1000 chars."""
    results = []
    for item in (payload.get("results") or [])[:MAX_RESULTS]:
        results.append(
            SearchResult(
                title=item.get("title") or "",
                url=item.get("url") or "",
                snippet=(item.get("text") or "")[:MAX_SNIPPET_CHARS],
            )
        )
    return SearchResults(results=results)


async def search_web(
    http_client: httpx.AsyncClient, api_key: str | None, query: str, specific_domain: str | None = None
) -> SearchResults:
    """Run a search and return trimmed results."""
    if not api_key:
        raise ToolExecutionError("Web search is not configured (EXA_API_KEY is not set)")

    response = await http_client.post(
        SEARCH_URL,
        json=build_search_request(query, specific_domain),
        headers={"x-api-key": api_key},
    )
    response.raise_for_status()

    try:
        payload = response.json()
    except ValueError as e:
        raise ToolExecutionError(f"Malformed search response: {e}") from e
    if not isinstance(payload, dict):
        raise ToolExecutionError("Malformed search response: expected a JSON object")

    return parse_search_results(payload)


def create_web_search_tool(http_client: httpx.AsyncClient, status: StatusReporter, api_key: str | None) -> BaseTool:
    @tool("search_web", args_schema=WebSearchInput)
    async def search_web_handler(query: str, specific_domain: str | None = None) -> str:
        """Search the web for information.

        Use for anything recent or anything you are not sure about. Returns up
        to three results with title, URL and a text snippet. Always cite the
        URLs you relied on inline in the final answer.
        """
        status.report(f'Searching the web for "{query}"...')
        logger.info(f"Searching the web for {query!r} (domain: {specific_domain})")

        results = await search_web(http_client, api_key, query, specific_domain)
        return results.model_dump_json()

    search_web_handler.metadata = source_metadata("static")
    return search_web_handler
