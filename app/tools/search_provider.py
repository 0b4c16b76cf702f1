from __future__ import annotations

from typing import Protocol

from app.config import Settings
from app.models.entities import SearchResult
from app.tools.mock_search import MockSearchProvider


class SearchProvider(Protocol):
    async def search(self, query: str) -> list[SearchResult]: ...


def get_search_provider(settings: Settings) -> SearchProvider:
    provider = settings.search_provider.lower().strip()
    if provider == "mock":
        return MockSearchProvider(latency_seconds=settings.search_latency_seconds)
    raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")


def results_to_dicts(results: list[SearchResult]) -> list[dict[str, str]]:
    """Convert SearchResult list to JSON-serializable dicts."""
    return [r.to_dict() for r in results]
