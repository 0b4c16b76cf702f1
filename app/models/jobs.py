from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any
from uuid import uuid4

from app.models.entities import REQUIRED_FIELDS, ResearchPayload


class JobStatus(StrEnum):
    QUEUED = "queued"
    RUNNING = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


def new_job_id() -> str:
    return f"job_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Immutable copy of a job's progress taken at emission time."""

    job_id: str
    person_id: str
    status: JobStatus
    current_iteration: int
    max_iterations: int
    current_query: str | None
    found_fields: tuple[str, ...]
    missing_fields: tuple[str, ...]
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "job_id": self.job_id,
            "person_id": self.person_id,
            "status": self.status.value,
            "current_iteration": self.current_iteration,
            "max_iterations": self.max_iterations,
            "found_fields": list(self.found_fields),
            "missing_fields": list(self.missing_fields),
        }
        if self.current_query is not None:
            data["current_query"] = self.current_query
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class JobProgress:
    job_id: str
    person_id: str
    max_iterations: int
    status: JobStatus = JobStatus.QUEUED
    current_iteration: int = 0
    current_query: str | None = None
    found_fields: list[str] = field(default_factory=list)
    missing_fields: list[str] = field(default_factory=lambda: list(REQUIRED_FIELDS))
    error: str | None = None

    def set_fields(self, found: list[str], missing: list[str]) -> None:
        self.found_fields = list(found)
        self.missing_fields = list(missing)

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            job_id=self.job_id,
            person_id=self.person_id,
            status=self.status,
            current_iteration=self.current_iteration,
            max_iterations=self.max_iterations,
            current_query=self.current_query,
            found_fields=tuple(self.found_fields),
            missing_fields=tuple(self.missing_fields),
            error=self.error,
        )


@dataclass(slots=True)
class Job:
    """One research attempt for one person."""

    id: str
    person_id: str
    progress: JobProgress
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
    result: ResearchPayload | None = None

    @classmethod
    def create(cls, person_id: str, *, max_iterations: int) -> Job:
        job_id = new_job_id()
        return cls(
            id=job_id,
            person_id=person_id,
            progress=JobProgress(
                job_id=job_id,
                person_id=person_id,
                max_iterations=max_iterations,
            ),
        )

    def mark_running(self) -> None:
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now(timezone.utc)
        self.progress.status = JobStatus.RUNNING
        self.progress.current_iteration = 1

    def mark_completed(self, payload: ResearchPayload) -> None:
        self.status = JobStatus.COMPLETED
        self.completed_at = datetime.now(timezone.utc)
        self.result = payload
        self.progress.status = JobStatus.COMPLETED
        self.progress.set_fields(payload.found_fields(), payload.missing_fields())
        self.progress.current_query = None

    def mark_failed(self, error: str) -> None:
        self.status = JobStatus.FAILED
        self.completed_at = datetime.now(timezone.utc)
        self.error = error
        self.progress.status = JobStatus.FAILED
        self.progress.error = error

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "person_id": self.person_id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "error": self.error,
            "progress": self.progress.snapshot().to_dict(),
            "result": self.result.to_dict() if self.result is not None else None,
        }
