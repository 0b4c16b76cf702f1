"""In-memory entity store for campaigns, companies, people and research audit records."""

from __future__ import annotations

from app.models.entities import (
    Campaign,
    CampaignStatus,
    Company,
    ContextSnippet,
    EntityType,
    Person,
    ResearchPayload,
    SearchLog,
    SearchResult,
)
from app.services.logger import log_db_operation


class EntityStore:
    def __init__(self) -> None:
        self._campaigns: dict[str, Campaign] = {}
        self._companies: dict[str, Company] = {}
        self._people: dict[str, Person] = {}
        self._context_snippets: dict[str, ContextSnippet] = {}
        self._search_logs: dict[str, SearchLog] = {}

    def seed_demo_data(self) -> None:
        """Create one campaign, one company and two people."""
        campaign = self.create_campaign("Q1 2024 Outreach Campaign", status="active")
        company = self.create_company(
            campaign.id,
            name="TechCorp Solutions",
            domain="techcorp.com",
        )
        self.create_person(
            company.id,
            full_name="Sarah Johnson",
            email="sarah.johnson@techcorp.com",
            title="Chief Technology Officer",
        )
        self.create_person(
            company.id,
            full_name="Michael Chen",
            email="michael.chen@techcorp.com",
            title="VP of Engineering",
        )

    # --- Campaigns ---

    def create_campaign(self, name: str, *, status: CampaignStatus = "draft") -> Campaign:
        campaign = Campaign(name=name, status=status)
        self._campaigns[campaign.id] = campaign
        log_db_operation("insert", "campaigns", "success", details=campaign.id)
        return campaign

    def get_campaigns(self) -> list[Campaign]:
        return list(self._campaigns.values())

    def get_campaign(self, campaign_id: str) -> Campaign | None:
        return self._campaigns.get(campaign_id)

    # --- Companies ---

    def create_company(
        self,
        campaign_id: str,
        *,
        name: str | None = None,
        domain: str | None = None,
    ) -> Company:
        company = Company(campaign_id=campaign_id, name=name, domain=domain)
        self._companies[company.id] = company
        log_db_operation("insert", "companies", "success", details=company.id)
        return company

    def get_companies(self) -> list[Company]:
        return list(self._companies.values())

    def get_company(self, company_id: str) -> Company | None:
        return self._companies.get(company_id)

    def get_companies_by_campaign(self, campaign_id: str) -> list[Company]:
        return [c for c in self._companies.values() if c.campaign_id == campaign_id]

    # --- People ---

    def create_person(
        self,
        company_id: str,
        *,
        full_name: str | None = None,
        email: str | None = None,
        title: str | None = None,
    ) -> Person:
        person = Person(company_id=company_id, full_name=full_name, email=email, title=title)
        self._people[person.id] = person
        log_db_operation("insert", "people", "success", details=person.id)
        return person

    def get_people(self) -> list[Person]:
        return list(self._people.values())

    def get_person(self, person_id: str) -> Person | None:
        return self._people.get(person_id)

    def get_people_by_company(self, company_id: str) -> list[Person]:
        return [p for p in self._people.values() if p.company_id == company_id]

    def get_people_with_companies(self) -> list[tuple[Person, Company]]:
        """Pair each person with their company, skipping people whose company is missing."""
        pairs: list[tuple[Person, Company]] = []
        for person in self._people.values():
            company = self._companies.get(person.company_id)
            if company is not None:
                pairs.append((person, company))
        return pairs

    # --- Context snippets ---

    def create_context_snippet(
        self,
        entity_type: EntityType,
        entity_id: str,
        snippet_type: str,
        payload: ResearchPayload | None = None,
        source_urls: list[str] | None = None,
    ) -> ContextSnippet:
        snippet = ContextSnippet(
            entity_type=entity_type,
            entity_id=entity_id,
            snippet_type=snippet_type,
            payload=payload if payload is not None else ResearchPayload(),
            source_urls=list(source_urls or []),
        )
        self._context_snippets[snippet.id] = snippet
        log_db_operation("insert", "context_snippets", "success", details=snippet.id)
        return snippet

    def get_context_snippets(self) -> list[ContextSnippet]:
        return list(self._context_snippets.values())

    def get_context_snippet(self, snippet_id: str) -> ContextSnippet | None:
        return self._context_snippets.get(snippet_id)

    def get_context_snippets_by_entity(
        self, entity_type: EntityType, entity_id: str
    ) -> list[ContextSnippet]:
        return [
            s
            for s in self._context_snippets.values()
            if s.entity_type == entity_type and s.entity_id == entity_id
        ]

    def update_context_snippet(
        self,
        snippet_id: str,
        *,
        payload: ResearchPayload | None = None,
        source_urls: list[str] | None = None,
    ) -> ContextSnippet | None:
        snippet = self._context_snippets.get(snippet_id)
        if snippet is None:
            log_db_operation(
                "update", "context_snippets", "error", details=snippet_id, error="not found"
            )
            return None
        if payload is not None:
            snippet.payload = payload
        if source_urls is not None:
            snippet.source_urls = list(source_urls)
        log_db_operation("update", "context_snippets", "success", details=snippet_id)
        return snippet

    # --- Search logs ---

    def create_search_log(
        self,
        context_snippet_id: str,
        iteration: int,
        query: str,
        top_results: list[SearchResult],
    ) -> SearchLog:
        search_log = SearchLog(
            context_snippet_id=context_snippet_id,
            iteration=iteration,
            query=query,
            top_results=list(top_results),
        )
        self._search_logs[search_log.id] = search_log
        log_db_operation("insert", "search_logs", "success", details=search_log.id)
        return search_log

    def get_search_logs(self) -> list[SearchLog]:
        return list(self._search_logs.values())

    def get_search_logs_by_snippet(self, snippet_id: str) -> list[SearchLog]:
        return [log for log in self._search_logs.values() if log.context_snippet_id == snippet_id]
