"""Error types raised by the research pipeline."""

from __future__ import annotations


class ResearchError(Exception):
    """Base class for research pipeline errors."""


class NotFoundError(ResearchError):
    """A person or company referenced by a job could not be resolved."""


class SearchUnavailableError(ResearchError):
    """A search provider failed to answer a query."""
