from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


# --- Entities ---


class CampaignResponse(BaseModel):
    id: str
    name: str
    status: Literal["draft", "active", "completed"]
    created_at: str


class CompanyResponse(BaseModel):
    id: str
    campaign_id: str
    name: str | None
    domain: str | None
    created_at: str


class PersonResponse(BaseModel):
    id: str
    company_id: str
    full_name: str | None
    email: str | None
    title: str | None
    created_at: str


class PersonWithCompanyResponse(PersonResponse):
    company: CompanyResponse


class PeopleListResponse(BaseModel):
    people: list[PersonWithCompanyResponse]


class ResearchPayloadResponse(BaseModel):
    company_value_prop: str | None = None
    product_names: list[str] | None = None
    pricing_model: str | None = None
    key_competitors: list[str] | None = None
    company_domain: str | None = None


class ContextSnippetResponse(BaseModel):
    id: str
    entity_type: Literal["company", "person"]
    entity_id: str
    snippet_type: str
    payload: ResearchPayloadResponse
    source_urls: list[str]
    created_at: str


class SnippetsResponse(BaseModel):
    snippets: list[ContextSnippetResponse]


class SearchResultResponse(BaseModel):
    url: str
    title: str
    snippet: str


class SearchLogResponse(BaseModel):
    id: str
    context_snippet_id: str
    iteration: int
    query: str
    top_results: list[SearchResultResponse]
    created_at: str


class SearchLogsResponse(BaseModel):
    search_logs: list[SearchLogResponse]


# --- Jobs ---

JobStatusValue = Literal["queued", "in_progress", "completed", "failed"]


class EnrichPersonResponse(BaseModel):
    job_id: str
    status: JobStatusValue
    message: str


class ResearchProgressResponse(BaseModel):
    job_id: str
    person_id: str
    status: JobStatusValue
    current_iteration: int
    max_iterations: int
    current_query: str | None = None
    found_fields: list[str]
    missing_fields: list[str]
    error: str | None = None


class JobResponse(BaseModel):
    id: str
    person_id: str
    status: JobStatusValue
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
    progress: ResearchProgressResponse
    result: ResearchPayloadResponse | None = None


class JobsResponse(BaseModel):
    jobs: list[JobResponse]


class HealthResponse(BaseModel):
    status: Literal["ok"]
    service: str
    timestamp: str
