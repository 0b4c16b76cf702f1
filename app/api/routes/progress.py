from __future__ import annotations

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from app.api.deps import get_job_queue, get_settings
from app.config import Settings
from app.services import logger as log_service
from app.services import streaming
from app.services.job_queue import JobQueue

router = APIRouter(prefix="/api", tags=["progress"])


@router.get("/progress-stream")
async def progress_stream(
    job_queue: JobQueue = Depends(get_job_queue),
    settings: Settings = Depends(get_settings),
):
    """SSE endpoint that pushes job lifecycle events to every connected client."""

    async def event_generator():
        events = streaming.progress_events(
            job_queue,
            heartbeat_interval=settings.progress_heartbeat_seconds,
        )
        try:
            async for event in events:
                yield {"data": event.to_json()}
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Progress stream failed",
                error=str(e),
            )
        finally:
            await events.aclose()

    return EventSourceResponse(event_generator())
