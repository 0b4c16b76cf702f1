"""Keyword heuristics that fill research payload fields from search snippets."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable

from app.models.entities import ResearchPayload, SearchResult
from app.tools import web_utils

VALUE_PROP_MARKERS = (
    "platform",
    "solution",
    "helps",
    "provides",
    "offers",
    "enables",
    "delivers",
    "specializes",
)

PRODUCT_MARKERS = (
    "product",
    "platform",
    "software",
    "service",
    "tool",
    "solution",
    "app",
    "api",
)

PRICING_MARKERS = (
    "$",
    "pricing",
    "plan",
    "subscription",
    "cost",
    "price",
    "tier",
    "billing",
    "free",
    "premium",
)

COMPETITOR_MARKERS = (
    "competitor",
    "alternative",
    "vs",
    "compared to",
    "similar to",
    "rival",
)

KNOWN_COMPETITORS = (
    "aws",
    "amazon web services",
    "google cloud",
    "microsoft azure",
    "azure",
    "digitalocean",
    "heroku",
    "ibm cloud",
    "oracle cloud",
    "alibaba cloud",
    "linode",
    "vercel",
    "netlify",
    "cloudflare",
    "salesforce",
    "hubspot",
    "zendesk",
    "atlassian",
    "datadog",
    "new relic",
)

MAX_PRODUCTS = 5
MAX_COMPETITORS = 8

CAMEL_CASE = re.compile(r"\b[A-Z][a-z]+(?:[A-Z][a-z]+)+\b")
TITLE_CASE_PAIR = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")
QUOTED = re.compile(r"[\"“]([^\"”]{2,60})[\"”]")
EXPLICIT_PRODUCT_LIST = re.compile(
    r"products?\s+(?:include|includes|including|are)\s+([^.;]+)", re.IGNORECASE
)
CAPITALIZED_NAME = re.compile(r"\b[A-Z][A-Za-z0-9]*(?:\s+[A-Z][A-Za-z0-9]*)+\b")

PRICE_PATTERNS = (
    # "$99/month", "$12 per seat", "$49"; skips funding amounts such as "$50M"
    re.compile(
        r"[$€£]\s?\d[\d,]*(?:\.\d+)?"
        r"(?:\s?(?:/|per)\s?(?:month|mo|year|yr|user|seat|annum)\b|(?!\w|\.\d))"
    ),
    re.compile(r"\bfree(?:\s|-)(?:tier|plan|trial)\b|\bfreemium\b", re.IGNORECASE),
    re.compile(r"\bsubscription(?:\s|-)based\b|\b(?:monthly|annual|yearly) subscriptions?\b", re.IGNORECASE),
)

URL_HOST = re.compile(r"https?://([^/\s\"'<>]+)", re.IGNORECASE)
BARE_DOMAIN = re.compile(r"\b((?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,})\b", re.IGNORECASE)


def _contains_marker(text: str, markers: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def _has_competitor_marker(text: str) -> bool:
    lowered = text.lower()
    for marker in COMPETITOR_MARKERS:
        if marker == "vs":
            if re.search(r"\bvs\.?\b", lowered):
                return True
        elif marker in lowered:
            return True
    return False


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        cleaned = " ".join(item.split()).strip(" ,.;:")
        if not cleaned:
            continue
        key = cleaned.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def _result_text(result: SearchResult) -> str:
    return f"{result.title} {result.snippet}"


def _is_own_name(name: str, company_name: str | None) -> bool:
    own_name = (company_name or "").lower().strip()
    if not own_name:
        return False
    lowered = name.lower()
    return lowered == own_name or lowered in own_name or own_name.split()[0] in lowered.split()


def extract_value_prop(results: list[SearchResult]) -> str | None:
    for result in results:
        for text in (result.snippet, result.title):
            for sentence in web_utils.split_sentences(text):
                if not _contains_marker(sentence, VALUE_PROP_MARKERS):
                    continue
                if not sentence.endswith((".", "!", "?")):
                    sentence = f"{sentence}."
                cleaned = web_utils.clean_text(sentence)
                if cleaned:
                    return cleaned
    return None


def _split_product_list(raw: str) -> list[str]:
    parts = re.split(r",|\band\b|&", raw)
    names: list[str] = []
    for part in parts:
        # "CloudDeploy for automated deployments" -> "CloudDeploy"
        name = re.split(r"\s+(?:for|to|which|that|with)\s+", part.strip(), maxsplit=1)[0]
        if name and name[0].isupper():
            names.append(name)
    return names


def extract_product_names(
    results: list[SearchResult],
    company_name: str | None = None,
) -> list[str] | None:
    candidates: list[str] = []
    for result in results:
        text = _result_text(result)
        if not _contains_marker(text, PRODUCT_MARKERS):
            continue
        candidates.extend(CAMEL_CASE.findall(text))
        candidates.extend(TITLE_CASE_PAIR.findall(text))
        candidates.extend(QUOTED.findall(text))
        for match in EXPLICIT_PRODUCT_LIST.findall(text):
            candidates.extend(_split_product_list(match))

    products = [name for name in _dedupe(candidates) if not _is_own_name(name, company_name)]
    return products[:MAX_PRODUCTS] or None


def extract_pricing_model(results: list[SearchResult]) -> str | None:
    matched = [r for r in results if _contains_marker(_result_text(r), PRICING_MARKERS)]
    if not matched:
        return None

    prices: list[str] = []
    for result in matched:
        text = _result_text(result)
        for pattern in PRICE_PATTERNS:
            prices.extend(pattern.findall(text))

    prices = _dedupe(prices)
    if prices:
        return web_utils.clean_text(", ".join(prices), max_length=200) or None

    for result in matched:
        for sentence in web_utils.split_sentences(result.snippet):
            if _contains_marker(sentence, PRICING_MARKERS):
                return web_utils.clean_text(sentence, max_length=200) or None
    return None


def extract_competitors(
    results: list[SearchResult],
    company_name: str | None = None,
) -> list[str] | None:
    names: list[str] = []
    for result in results:
        for sentence in web_utils.split_sentences(_result_text(result)):
            if not _has_competitor_marker(sentence):
                continue
            for candidate in CAPITALIZED_NAME.findall(sentence):
                if not _is_own_name(candidate, company_name):
                    names.append(candidate)

    all_text = " ".join(_result_text(r) for r in results).lower()
    for known in KNOWN_COMPETITORS:
        if re.search(rf"\b{re.escape(known)}\b", all_text):
            names.append(" ".join(word.capitalize() for word in known.split()))

    competitors = _dedupe(names)[:MAX_COMPETITORS]
    return competitors or None


def extract_company_domain(results: list[SearchResult]) -> str | None:
    for result in results:
        text = f"{result.title} {result.snippet} {result.url}"
        candidates = [web_utils.extract_domain(f"https://{host}") for host in URL_HOST.findall(text)]
        candidates.extend(match.lower() for match in BARE_DOMAIN.findall(text))
        for candidate in candidates:
            if candidate and web_utils.is_valid_domain(candidate):
                return candidate
    return None


_EXTRACTORS: dict[str, Callable[..., Any]] = {
    "company_value_prop": extract_value_prop,
    "product_names": extract_product_names,
    "pricing_model": extract_pricing_model,
    "key_competitors": extract_competitors,
    "company_domain": extract_company_domain,
}


def extract_fields(
    results: list[SearchResult],
    payload: ResearchPayload,
    target_fields: Iterable[str],
    *,
    company_name: str | None = None,
) -> dict[str, Any]:
    """Fill targeted fields that are still empty. Returns only the newly set fields."""
    extracted: dict[str, Any] = {}
    targets = set(target_fields)

    for field_name, extractor in _EXTRACTORS.items():
        if field_name not in targets or payload.has(field_name):
            continue
        if field_name in ("product_names", "key_competitors"):
            value = extractor(results, company_name)
        else:
            value = extractor(results)
        if value:
            setattr(payload, field_name, value)
            extracted[field_name] = value

    return extracted
