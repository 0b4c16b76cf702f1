from __future__ import annotations

import re
from urllib.parse import urlparse

DOMAIN_PATTERN = re.compile(
    r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$"
)
MAX_DOMAIN_LENGTH = 100

_DISALLOWED_CHARS = re.compile(r"[^\w\s\-.,;:()$/%&+']")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def is_valid_domain(domain: str) -> bool:
    return len(domain) < MAX_DOMAIN_LENGTH and bool(DOMAIN_PATTERN.match(domain))


def extract_domain(url: str) -> str:
    """Extract the host from a URL, without port or credentials."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def domain_from_email(email: str | None) -> str | None:
    if not email:
        return None
    match = re.search(r"@([^@\s]+)$", email.strip())
    if not match:
        return None
    return match.group(1).lower()


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]


def clean_text(text: str, max_length: int = 500) -> str:
    """Collapse whitespace, strip unusual characters, drop repeated sentences."""
    text = re.sub(r"\s+", " ", text).strip()
    text = _DISALLOWED_CHARS.sub("", text)

    seen: set[str] = set()
    sentences: list[str] = []
    for sentence in split_sentences(text):
        key = sentence.lower()
        if key in seen:
            continue
        seen.add(key)
        sentences.append(sentence)

    return " ".join(sentences)[:max_length]
