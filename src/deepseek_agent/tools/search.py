"""Serper (Google search) adapter and result formatter."""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, Field, ValidationError

from deepseek_agent.errors import SearchError

logger = logging.getLogger(__name__)

SERPER_SEARCH_URL = "https://google.serper.dev/search"

NO_RESULTS = "No relevant results found."


class SearchResult(BaseModel):
    title: str
    link: str
    snippet: str = ""


class _OrganicResult(SearchResult):
    position: int = 0


class _SearchResponse(BaseModel):
    organic: list[_OrganicResult] = Field(default_factory=list)


async def search(
    query: str,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Run a web search and return the organic results in rank order.

    Raises:
        SearchError: the request failed or the body could not be decoded.
    """
    if client is None:
        async with httpx.AsyncClient() as owned:
            return await _post(owned, query, api_key)
    return await _post(client, query, api_key)


async def _post(client: httpx.AsyncClient, query: str, api_key: str) -> list[SearchResult]:
    try:
        response = await client.post(
            SERPER_SEARCH_URL,
            headers={"X-API-KEY": api_key},
            json={"q": query, "type": "search"},
        )
        response.raise_for_status()
        body = _SearchResponse.model_validate(response.json())
    except httpx.HTTPError as exc:
        raise SearchError(str(exc)) from exc
    except (ValueError, ValidationError) as exc:
        raise SearchError(f"malformed response: {exc}") from exc

    logger.debug("Search %r returned %d organic results", query, len(body.organic))
    return [SearchResult(title=r.title, link=r.link, snippet=r.snippet) for r in body.organic]


def format_results(results: list[SearchResult], max_count: int) -> str:
    """Render the first *max_count* results as a numbered list."""
    entries = [
        f"{i}. {result.title}\n   Link: {result.link}\n   Snippet: {result.snippet}\n"
        for i, result in enumerate(results[:max_count], start=1)
    ]
    if not entries:
        return NO_RESULTS
    return "\n".join(entries)
