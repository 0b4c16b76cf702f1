"""Serial research job queue with in-process progress fan-out."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import suppress
from dataclasses import dataclass
from typing import Callable, Iterable
from uuid import uuid4

from loguru import logger

from app.agents.orchestrator import ResearchOrchestrator
from app.models.events import JOB_EVENT_TYPES, EventType, ProgressEvent
from app.models.jobs import Job
from app.services import logger as log_service
from app.services import streaming

EventHandler = Callable[[ProgressEvent], None]


@dataclass(slots=True)
class _Subscription:
    handler: EventHandler
    kinds: frozenset[EventType]


class JobQueue:
    """Runs one research job at a time, in submission order.

    ``enqueue`` never blocks: it records the job, emits ``queued`` and wakes the
    worker task. Every lifecycle transition is published to subscribers as a
    ``ProgressEvent`` holding an immutable snapshot of the job's progress.
    """

    def __init__(self, orchestrator: ResearchOrchestrator):
        self.orchestrator = orchestrator
        self.max_iterations = orchestrator.max_iterations
        self._jobs: dict[str, Job] = {}
        self._pending: deque[str] = deque()
        self._subscriptions: dict[str, _Subscription] = {}
        self._is_processing = False
        self._wake = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._worker: asyncio.Task | None = None

    # --- Introspection ---

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def get_job(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def list_jobs(self) -> list[Job]:
        """All jobs, newest first."""
        newest_first = list(reversed(self._jobs.values()))
        return sorted(newest_first, key=lambda job: job.created_at, reverse=True)

    # --- Subscriptions ---

    def subscribe(
        self,
        handler: EventHandler,
        kinds: Iterable[EventType] | None = None,
    ) -> str:
        """Register a handler for job events. Returns a token for ``unsubscribe``."""
        selected = frozenset(kinds) if kinds is not None else JOB_EVENT_TYPES
        token = uuid4().hex
        self._subscriptions[token] = _Subscription(handler=handler, kinds=selected & JOB_EVENT_TYPES)
        return token

    def unsubscribe(self, token: str) -> bool:
        return self._subscriptions.pop(token, None) is not None

    def _emit(self, event_type: EventType, job: Job) -> None:
        event = streaming.job_event(event_type, job.progress.snapshot())
        for token, subscription in list(self._subscriptions.items()):
            if event_type not in subscription.kinds:
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception(f"Progress subscriber {token} failed on {event_type.value} for {job.id}")

    # --- Submission ---

    def enqueue(self, person_id: str) -> str:
        if not person_id:
            raise ValueError("person_id is required")

        job = Job.create(person_id, max_iterations=self.max_iterations)
        self._jobs[job.id] = job
        self._pending.append(job.id)
        self._idle.clear()

        log_service.log_event(
            event_type="job_queued",
            message="Research job queued",
            job_id=job.id,
            person_id=person_id,
            pending=len(self._pending),
        )
        self._emit(EventType.QUEUED, job)
        self._wake.set()
        return job.id

    # --- Worker ---

    def start(self) -> None:
        """Start the worker task on the running event loop."""
        if self._worker is not None and not self._worker.done():
            return
        self._worker = asyncio.create_task(self._run(), name="research-job-queue")
        if self._pending:
            self._wake.set()

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        with suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

    async def join(self) -> None:
        """Wait until the backlog is drained and no job is running."""
        await self._idle.wait()

    async def _run(self) -> None:
        while True:
            await self._wake.wait()
            self._wake.clear()
            while self._pending:
                await self.process_next()

    async def process_next(self) -> bool:
        """Run the next pending job. No-op while another job is running."""
        if self._is_processing or not self._pending:
            return False

        self._is_processing = True
        try:
            job_id = self._pending.popleft()
            job = self._jobs.get(job_id)
            if job is None:
                return False
            await self._run_job(job)
            return True
        finally:
            self._is_processing = False
            if not self._pending:
                self._idle.set()

    async def _run_job(self, job: Job) -> None:
        logger.info(f"Starting job {job.id} for person {job.person_id}")
        job.mark_running()
        self._emit(EventType.PROGRESS, job)

        def on_progress(
            iteration: int,
            query: str,
            found_fields: list[str],
            missing_fields: list[str],
        ) -> None:
            job.progress.current_iteration = iteration
            job.progress.current_query = query
            job.progress.set_fields(found_fields, missing_fields)
            self._emit(EventType.PROGRESS, job)

        try:
            payload = await self.orchestrator.run(job.person_id, on_progress=on_progress)
        except Exception as e:
            job.mark_failed(str(e) or "Unknown error")
            log_service.log_event(
                event_type="job_failed",
                message="Research job failed",
                job_id=job.id,
                person_id=job.person_id,
                error=job.error,
            )
            self._emit(EventType.FAILED, job)
            return

        job.mark_completed(payload)
        log_service.log_event(
            event_type="job_completed",
            message="Research job completed",
            job_id=job.id,
            person_id=job.person_id,
            found_fields=list(job.progress.found_fields),
            missing_fields=list(job.progress.missing_fields),
        )
        self._emit(EventType.COMPLETED, job)
