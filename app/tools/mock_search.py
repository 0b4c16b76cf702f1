from __future__ import annotations

import asyncio

from app.errors import SearchUnavailableError
from app.models.entities import SearchResult

MOCK_RESULTS: dict[str, list[SearchResult]] = {
    "TechCorp Solutions": [
        SearchResult(
            url="https://techcorp.com",
            title="TechCorp Solutions - Cloud Infrastructure Platform",
            snippet=(
                "TechCorp Solutions provides enterprise-grade cloud infrastructure and DevOps "
                "automation tools. Our platform helps companies scale their applications with "
                "99.9% uptime guarantee."
            ),
        ),
        SearchResult(
            url="https://techcorp.com/pricing",
            title="TechCorp Pricing - Flexible Plans",
            snippet=(
                "Choose from our Starter ($99/month), Professional ($299/month), or Enterprise "
                "(custom pricing) plans. All plans include 24/7 support and advanced monitoring."
            ),
        ),
        SearchResult(
            url="https://techcrunch.com/techcorp-funding",
            title="TechCorp Raises $50M Series B",
            snippet=(
                "TechCorp competes with AWS, Google Cloud, and Azure in the cloud infrastructure "
                "space. Key differentiators include simplified DevOps workflows and cost "
                "optimization."
            ),
        ),
    ],
    "TechCorp products": [
        SearchResult(
            url="https://techcorp.com/products",
            title="TechCorp Products - CloudDeploy & MonitorPro",
            snippet=(
                "Our flagship products include CloudDeploy for automated deployments, MonitorPro "
                "for application monitoring, and ScaleMaster for auto-scaling infrastructure."
            ),
        ),
        SearchResult(
            url="https://docs.techcorp.com",
            title="TechCorp Documentation",
            snippet=(
                "Complete documentation for CloudDeploy, MonitorPro, and ScaleMaster products "
                "with API references and integration guides."
            ),
        ),
    ],
    "TechCorp competitors": [
        SearchResult(
            url="https://industry-report.com/cloud-platforms",
            title="Cloud Platform Market Analysis 2024",
            snippet=(
                "Major competitors in the cloud infrastructure space include AWS, Google Cloud "
                "Platform, Microsoft Azure, DigitalOcean, and Heroku."
            ),
        ),
        SearchResult(
            url="https://techcorp.com/vs-competition",
            title="TechCorp vs Competition",
            snippet=(
                "TechCorp differentiates from AWS and Azure through simplified deployment "
                "processes and 40% lower costs for mid-market companies."
            ),
        ),
    ],
}


class MockSearchProvider:
    """Deterministic search stub keyed by keyword match."""

    name = "mock"

    def __init__(
        self,
        *,
        latency_seconds: float = 1.0,
        results: dict[str, list[SearchResult]] | None = None,
    ):
        self.latency_seconds = max(float(latency_seconds), 0.0)
        self.results = results if results is not None else MOCK_RESULTS

    def match(self, query: str) -> list[SearchResult]:
        lowered = query.lower()
        for key, results in self.results.items():
            # First word of the key decides the match; declaration order breaks ties
            if key.lower().split(" ")[0] in lowered:
                return list(results)

        return [
            SearchResult(
                url="https://example.com",
                title=f"Search Result for: {query}",
                snippet=f"This is a mock search result for the query: {query}",
            )
        ]

    async def search(self, query: str) -> list[SearchResult]:
        if not query or not query.strip():
            raise SearchUnavailableError("Search query is empty")
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)
        return self.match(query)
