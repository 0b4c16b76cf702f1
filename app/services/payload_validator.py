"""Advisory shape checks for research payloads. Results are logged, never enforced."""

from __future__ import annotations

from dataclasses import dataclass, field

from app.models.entities import ResearchPayload
from app.tools import web_utils


@dataclass(slots=True)
class PayloadValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _check_text(errors: list[str], name: str, value: object, min_len: int, max_len: int) -> None:
    if not isinstance(value, str):
        errors.append(f"{name} must be a string")
    elif len(value) < min_len or len(value) > max_len:
        errors.append(f"{name} must be between {min_len} and {max_len} characters")


def _check_names(errors: list[str], name: str, value: object, max_items: int) -> None:
    if not isinstance(value, list):
        errors.append(f"{name} must be an array")
        return
    if len(value) == 0 or len(value) > max_items:
        errors.append(f"{name} must have between 1 and {max_items} items")
    for index, item in enumerate(value):
        if not isinstance(item, str) or len(item) == 0 or len(item) > 100:
            errors.append(f"{name}[{index}] must be a non-empty string with max 100 characters")


def validate_research_payload(payload: ResearchPayload) -> PayloadValidation:
    """Check each present field against its shape rule."""
    errors: list[str] = []

    if payload.company_value_prop is not None:
        _check_text(errors, "company_value_prop", payload.company_value_prop, 10, 500)
    if payload.product_names is not None:
        _check_names(errors, "product_names", payload.product_names, 10)
    if payload.pricing_model is not None:
        _check_text(errors, "pricing_model", payload.pricing_model, 5, 200)
    if payload.key_competitors is not None:
        _check_names(errors, "key_competitors", payload.key_competitors, 20)
    if payload.company_domain is not None:
        domain = payload.company_domain
        if not isinstance(domain, str):
            errors.append("company_domain must be a string")
        elif not web_utils.is_valid_domain(domain):
            errors.append("company_domain must be a valid domain name with max 100 characters")

    return PayloadValidation(valid=not errors, errors=errors)
