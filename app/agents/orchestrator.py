from __future__ import annotations

from typing import Callable

from loguru import logger

from app.errors import NotFoundError
from app.models.entities import REQUIRED_FIELDS, Company, ResearchPayload
from app.services import logger as log_service
from app.services.entity_store import EntityStore
from app.services.payload_validator import validate_research_payload
from app.tools import field_extractor, web_utils
from app.tools.search_provider import SearchProvider, results_to_dicts

ProgressCallback = Callable[[int, str, list[str], list[str]], None]

OVERVIEW_QUERY = "{company} company overview products services"

FIELD_QUERIES: dict[str, str] = {
    "company_value_prop": "{company} value proposition mission",
    "product_names": "{company} products platforms features",
    "pricing_model": "{company} pricing plans billing",
    "key_competitors": "{company} competitors alternatives market analysis",
    "company_domain": "{company} official website domain",
}


def build_query(company_name: str | None, missing_fields: list[str], iteration: int) -> str:
    """Pick the search query for one iteration.

    Iteration 1 is always a broad overview; later iterations target the first
    missing field.
    """
    company = company_name or "unknown company"
    if iteration == 1 or not missing_fields:
        return OVERVIEW_QUERY.format(company=company)

    target = missing_fields[0]
    template = FIELD_QUERIES.get(target)
    if template is None:
        return f"{company} {target}"
    return template.format(company=company)


class ResearchOrchestrator:
    """Iterative search/extract loop that fills a company's research payload.

    Flow per run:
      1. Resolve person and company, seed the domain from the record or email
      2. Open an audit context snippet for the company
      3. Up to ``max_iterations`` times: query for the most urgent missing
         field, log the search, extract into the payload, collect sources
      4. Validate the payload (advisory) and write it back to the snippet
    """

    def __init__(
        self,
        store: EntityStore,
        search: SearchProvider,
        *,
        max_iterations: int = 3,
        top_results: int = 3,
    ):
        self.store = store
        self.search = search
        self.max_iterations = max(int(max_iterations), 1)
        self.top_results = max(int(top_results), 1)

    def _seed_payload(self, company: Company, email: str | None) -> ResearchPayload:
        payload = ResearchPayload()
        if company.domain:
            payload.company_domain = company.domain
        else:
            email_domain = web_utils.domain_from_email(email)
            if email_domain:
                payload.company_domain = email_domain
        return payload

    async def run(
        self,
        person_id: str,
        on_progress: ProgressCallback | None = None,
    ) -> ResearchPayload:
        person = self.store.get_person(person_id)
        if person is None:
            raise NotFoundError("Person not found")

        company = self.store.get_company(person.company_id)
        if company is None:
            raise NotFoundError("Company not found")

        payload = self._seed_payload(company, person.email)
        source_urls: list[str] = []

        snippet = self.store.create_context_snippet(
            entity_type="company",
            entity_id=company.id,
            snippet_type="research",
            payload=payload.copy(),
            source_urls=[],
        )

        logger.info(f"Starting research for person {person_id} at {company.name or company.id}")

        for iteration in range(1, self.max_iterations + 1):
            missing = payload.missing_fields()
            if not missing:
                logger.info(
                    f"Research completed for {person.full_name or person_id} "
                    f"after {iteration - 1} iterations"
                )
                break

            query = build_query(company.name, missing, iteration)
            found = [name for name in REQUIRED_FIELDS if name not in missing]
            logger.info(f"Iteration {iteration}: searching for \"{query}\"")

            if on_progress is not None:
                on_progress(iteration, query, found, missing)

            try:
                results = await self.search.search(query)
            except Exception as e:
                log_service.log_event(
                    event_type="search_failed",
                    message=f"Search failed in iteration {iteration}",
                    error=str(e) or e.__class__.__name__,
                    person_id=person_id,
                    query=query,
                )
                continue

            top = results[: self.top_results]
            self.store.create_search_log(
                context_snippet_id=snippet.id,
                iteration=iteration,
                query=query,
                top_results=top,
            )

            extracted = field_extractor.extract_fields(
                top,
                payload,
                missing,
                company_name=company.name,
            )

            for result in top:
                if result.url not in source_urls:
                    source_urls.append(result.url)

            log_service.log_research_step(
                subject_id=person_id,
                step_type="search",
                status="completed",
                data={
                    "iteration": iteration,
                    "query": query,
                    "results": results_to_dicts(top),
                    "extracted": sorted(extracted),
                },
            )

        validation = validate_research_payload(payload)
        if not validation.valid:
            log_service.log_event(
                event_type="validation_warning",
                message="Research payload failed shape checks",
                person_id=person_id,
                error="; ".join(validation.errors),
            )

        self.store.update_context_snippet(
            snippet.id,
            payload=payload.copy(),
            source_urls=source_urls,
        )
        return payload
