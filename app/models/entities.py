from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal
from uuid import uuid4

CampaignStatus = Literal["draft", "active", "completed"]
EntityType = Literal["company", "person"]

REQUIRED_FIELDS: tuple[str, ...] = (
    "company_value_prop",
    "product_names",
    "pricing_model",
    "key_competitors",
    "company_domain",
)


def new_id() -> str:
    return str(uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class SearchResult:
    url: str
    title: str
    snippet: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "title": self.title, "snippet": self.snippet}


@dataclass(slots=True)
class ResearchPayload:
    """Accumulating research result for one company."""

    company_value_prop: str | None = None
    product_names: list[str] | None = None
    pricing_model: str | None = None
    key_competitors: list[str] | None = None
    company_domain: str | None = None

    def has(self, field_name: str) -> bool:
        value = getattr(self, field_name, None)
        if isinstance(value, list):
            return len(value) > 0
        if isinstance(value, str):
            return bool(value.strip())
        return False

    def found_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if self.has(name)]

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not self.has(name)]

    def copy(self) -> ResearchPayload:
        return ResearchPayload(
            company_value_prop=self.company_value_prop,
            product_names=list(self.product_names) if self.product_names is not None else None,
            pricing_model=self.pricing_model,
            key_competitors=list(self.key_competitors) if self.key_competitors is not None else None,
            company_domain=self.company_domain,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = list(value) if isinstance(value, list) else value
        return data


@dataclass(slots=True)
class Campaign:
    name: str
    status: CampaignStatus = "draft"
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Company:
    campaign_id: str
    name: str | None = None
    domain: str | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Person:
    company_id: str
    full_name: str | None = None
    email: str | None = None
    title: str | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ContextSnippet:
    """Audit record of one research run; payload and sources are updated in place."""

    entity_type: EntityType
    entity_id: str
    snippet_type: str
    payload: ResearchPayload = field(default_factory=ResearchPayload)
    source_urls: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "snippet_type": self.snippet_type,
            "payload": self.payload.to_dict(),
            "source_urls": list(self.source_urls),
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class SearchLog:
    context_snippet_id: str
    iteration: int
    query: str
    top_results: list[SearchResult] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "context_snippet_id": self.context_snippet_id,
            "iteration": self.iteration,
            "query": self.query,
            "top_results": [r.to_dict() for r in self.top_results],
            "created_at": self.created_at,
        }
