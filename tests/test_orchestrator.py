"""Tests for the research orchestrator."""
import pytest

from app.agents.orchestrator import FIELD_QUERIES, OVERVIEW_QUERY, ResearchOrchestrator, build_query
from app.errors import NotFoundError, SearchUnavailableError
from app.models.entities import REQUIRED_FIELDS
from app.services.entity_store import EntityStore
from app.tools.mock_search import MockSearchProvider


class RecordingSearch:
    """Search stub that records queries and returns nothing."""

    def __init__(self):
        self.queries: list[str] = []

    async def search(self, query):
        self.queries.append(query)
        return []


class FlakySearch:
    """Fails the first call, then behaves like the mock provider."""

    def __init__(self):
        self.calls = 0
        self.inner = MockSearchProvider(latency_seconds=0)

    async def search(self, query):
        self.calls += 1
        if self.calls == 1:
            raise SearchUnavailableError("search backend down")
        return await self.inner.search(query)


@pytest.fixture
def store():
    store = EntityStore()
    store.seed_demo_data()
    return store


@pytest.fixture
def sarah(store):
    return next(p for p in store.get_people() if p.full_name == "Sarah Johnson")


def _person_at(store, *, name, domain, email):
    campaign = store.create_campaign("Test campaign")
    company = store.create_company(campaign.id, name=name, domain=domain)
    return store.create_person(company.id, full_name="Pat Doe", email=email)


class TestBuildQuery:

    def test_first_iteration_is_broad(self):
        query = build_query("Acme", ["pricing_model"], 1)

        assert query == "Acme company overview products services"

    def test_later_iterations_target_first_missing_field(self):
        query = build_query("Acme", ["pricing_model", "key_competitors"], 2)

        assert query == "Acme pricing plans billing"

    def test_unknown_field_falls_back_to_name(self):
        assert build_query("Acme", ["headcount"], 3) == "Acme headcount"

    def test_missing_company_name(self):
        assert build_query(None, [], 2) == "unknown company company overview products services"


class TestResearchRun:

    @pytest.mark.asyncio
    async def test_techcorp_completes_in_one_iteration(self, store, sarah):
        orchestrator = ResearchOrchestrator(store, MockSearchProvider(latency_seconds=0))
        calls = []

        payload = await orchestrator.run(
            sarah.id,
            on_progress=lambda *args: calls.append(args),
        )

        assert len(calls) == 1
        iteration, query, found, missing = calls[0]
        assert iteration == 1
        assert query == "TechCorp Solutions company overview products services"
        assert found == ["company_domain"]
        assert missing == [f for f in REQUIRED_FIELDS if f != "company_domain"]

        assert payload.missing_fields() == []
        assert payload.company_domain == "techcorp.com"
        assert payload.pricing_model == "$99/month, $299/month"
        assert payload.key_competitors == ["Aws", "Google Cloud", "Azure"]

        snippets = store.get_context_snippets_by_entity("company", sarah.company_id)
        assert len(snippets) == 1
        snippet = snippets[0]
        assert snippet.snippet_type == "research"
        assert snippet.payload.to_dict() == payload.to_dict()
        assert snippet.source_urls == [
            "https://techcorp.com",
            "https://techcorp.com/pricing",
            "https://techcrunch.com/techcorp-funding",
        ]

        logs = store.get_search_logs_by_snippet(snippet.id)
        assert len(logs) == 1
        assert logs[0].iteration == 1
        assert len(logs[0].top_results) == 3

    @pytest.mark.asyncio
    async def test_top_results_limits_logged_results(self, store, sarah):
        orchestrator = ResearchOrchestrator(
            store, MockSearchProvider(latency_seconds=0), top_results=1
        )

        await orchestrator.run(sarah.id)

        logs = store.get_search_logs()
        assert all(len(log.top_results) == 1 for log in logs)
        assert logs[0].top_results[0].url == "https://techcorp.com"

    @pytest.mark.asyncio
    async def test_domain_seeded_from_email(self, store):
        person = _person_at(store, name="Globex", domain=None, email="pat@example.com")
        orchestrator = ResearchOrchestrator(store, RecordingSearch())
        calls = []

        payload = await orchestrator.run(person.id, on_progress=lambda *args: calls.append(args))

        assert payload.company_domain == "example.com"
        assert "company_domain" in calls[0][2]
        assert "company_domain" not in calls[0][3]

    @pytest.mark.asyncio
    async def test_company_domain_wins_over_email(self, store):
        person = _person_at(store, name="Globex", domain="globex.io", email="pat@gmail.com")
        orchestrator = ResearchOrchestrator(store, RecordingSearch())

        payload = await orchestrator.run(person.id)

        assert payload.company_domain == "globex.io"

    @pytest.mark.asyncio
    async def test_later_iterations_target_missing_fields(self, store):
        person = _person_at(store, name="Globex", domain="globex.io", email=None)
        search = RecordingSearch()
        orchestrator = ResearchOrchestrator(store, search, max_iterations=3)

        payload = await orchestrator.run(person.id)

        assert search.queries == [
            OVERVIEW_QUERY.format(company="Globex"),
            FIELD_QUERIES["company_value_prop"].format(company="Globex"),
            FIELD_QUERIES["company_value_prop"].format(company="Globex"),
        ]
        assert payload.found_fields() == ["company_domain"]

        snippet = store.get_context_snippets_by_entity("company", person.company_id)[0]
        assert [log.iteration for log in store.get_search_logs_by_snippet(snippet.id)] == [1, 2, 3]
        assert snippet.source_urls == []

    @pytest.mark.asyncio
    async def test_search_failure_skips_iteration(self, store, sarah):
        search = FlakySearch()
        orchestrator = ResearchOrchestrator(store, search)
        calls = []

        payload = await orchestrator.run(sarah.id, on_progress=lambda *args: calls.append(args))

        assert search.calls == 2
        assert [c[0] for c in calls] == [1, 2]
        assert calls[1][1] == "TechCorp Solutions value proposition mission"
        assert payload.missing_fields() == []

        logs = store.get_search_logs()
        assert [log.iteration for log in logs] == [2]

    @pytest.mark.asyncio
    async def test_missing_person(self, store):
        orchestrator = ResearchOrchestrator(store, RecordingSearch())

        with pytest.raises(NotFoundError, match="Person not found"):
            await orchestrator.run("nope")

        assert store.get_context_snippets() == []

    @pytest.mark.asyncio
    async def test_missing_company(self, store):
        person = store.create_person("no-such-company", full_name="Lost Person")
        orchestrator = ResearchOrchestrator(store, RecordingSearch())

        with pytest.raises(NotFoundError, match="Company not found"):
            await orchestrator.run(person.id)
