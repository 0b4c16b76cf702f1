from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING, AsyncGenerator

from app.models.events import EventType, ProgressEvent
from app.models.jobs import ProgressSnapshot
from app.services import logger as log_service

if TYPE_CHECKING:
    from app.services.job_queue import JobQueue


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def connected() -> ProgressEvent:
    return ProgressEvent(type=EventType.CONNECTED, timestamp=_timestamp())


def heartbeat() -> ProgressEvent:
    return ProgressEvent(type=EventType.HEARTBEAT, timestamp=_timestamp())


def job_event(event_type: EventType, snapshot: ProgressSnapshot) -> ProgressEvent:
    return ProgressEvent(type=event_type, data=snapshot)


async def progress_events(
    job_queue: JobQueue,
    *,
    heartbeat_interval: float = 30.0,
) -> AsyncGenerator[ProgressEvent, None]:
    """Yield ``connected``, then every job event as it happens, with heartbeats.

    The queue subscription lives exactly as long as the generator; closing it
    (client disconnect, transport error) detaches the handler.
    """
    inbox: asyncio.Queue[ProgressEvent] = asyncio.Queue()
    token = job_queue.subscribe(inbox.put_nowait)
    loop = asyncio.get_running_loop()
    log_service.log_event(
        event_type="stream_connected",
        message="Progress stream subscriber attached",
        subscribers=job_queue.subscriber_count,
    )

    try:
        yield connected()

        interval = max(float(heartbeat_interval), 0.001)
        next_heartbeat = loop.time() + interval
        while True:
            timeout = max(next_heartbeat - loop.time(), 0.0)
            try:
                event = await asyncio.wait_for(inbox.get(), timeout=timeout)
            except asyncio.TimeoutError:
                next_heartbeat += interval
                yield heartbeat()
                continue
            yield event
    finally:
        job_queue.unsubscribe(token)
        log_service.log_event(
            event_type="stream_disconnected",
            message="Progress stream subscriber detached",
            subscribers=job_queue.subscriber_count,
        )
