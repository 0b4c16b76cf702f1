from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_store
from app.models.entities import Company, Person
from app.models.schemas import (
    CampaignResponse,
    CompanyResponse,
    PeopleListResponse,
    PersonWithCompanyResponse,
    SearchLogsResponse,
    SnippetsResponse,
)
from app.services.entity_store import EntityStore

router = APIRouter(prefix="/api", tags=["people"])


def _person_with_company(person: Person, company: Company) -> dict:
    return {**person.to_dict(), "company": company.to_dict()}


@router.get("/people", response_model=PeopleListResponse)
async def list_people(store: EntityStore = Depends(get_store)):
    return {
        "people": [
            _person_with_company(person, company)
            for person, company in store.get_people_with_companies()
        ]
    }


@router.get("/people/{person_id}", response_model=PersonWithCompanyResponse)
async def get_person(person_id: str, store: EntityStore = Depends(get_store)):
    person = store.get_person(person_id)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    company = store.get_company(person.company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return _person_with_company(person, company)


@router.get("/campaigns", response_model=list[CampaignResponse])
async def list_campaigns(store: EntityStore = Depends(get_store)):
    return [c.to_dict() for c in store.get_campaigns()]


@router.get("/companies", response_model=list[CompanyResponse])
async def list_companies(store: EntityStore = Depends(get_store)):
    return [c.to_dict() for c in store.get_companies()]


@router.get("/snippets/company/{company_id}", response_model=SnippetsResponse)
async def company_snippets(company_id: str, store: EntityStore = Depends(get_store)):
    snippets = store.get_context_snippets_by_entity("company", company_id)
    return {"snippets": [s.to_dict() for s in snippets]}


@router.get("/snippets/person/{person_id}", response_model=SnippetsResponse)
async def person_snippets(person_id: str, store: EntityStore = Depends(get_store)):
    snippets = store.get_context_snippets_by_entity("person", person_id)
    return {"snippets": [s.to_dict() for s in snippets]}


@router.get("/snippets/{snippet_id}/search-logs", response_model=SearchLogsResponse)
async def snippet_search_logs(snippet_id: str, store: EntityStore = Depends(get_store)):
    if not store.get_context_snippet(snippet_id):
        raise HTTPException(status_code=404, detail="Context snippet not found")
    logs = sorted(store.get_search_logs_by_snippet(snippet_id), key=lambda log: log.iteration)
    return {"search_logs": [log.to_dict() for log in logs]}
