"""Prospect Research - enrichment pipeline

Simple CLI for running research jobs against the seeded demo data, or serving the API.
"""

import argparse
import asyncio

from app.agents.orchestrator import ResearchOrchestrator
from app.config import settings
from app.models.events import ProgressEvent
from app.services.entity_store import EntityStore
from app.services.job_queue import JobQueue
from app.tools.mock_search import MockSearchProvider


def print_event(event: ProgressEvent) -> None:
    data = event.data
    if data is None:
        return
    event_type = event.type.value

    if event_type == "queued":
        print(f"[+] Queued {data.job_id} for person {data.person_id}")

    elif event_type == "progress":
        query = f' - "{data.current_query}"' if data.current_query else ""
        print(f"  [~] Iteration {data.current_iteration}/{data.max_iterations}{query}")
        print(f"      found: {', '.join(data.found_fields) or '-'}")
        print(f"      missing: {', '.join(data.missing_fields) or '-'}")

    elif event_type == "completed":
        print(f"[*] {data.job_id} completed ({len(data.found_fields)} of 5 fields found)")

    elif event_type == "failed":
        print(f"[!] {data.job_id} failed: {data.error}")


async def run_research(person_ids: list[str], latency: float) -> None:
    store = EntityStore()
    store.seed_demo_data()

    orchestrator = ResearchOrchestrator(
        store,
        MockSearchProvider(latency_seconds=latency),
        max_iterations=settings.research_max_iterations,
        top_results=settings.research_top_results,
    )
    queue = JobQueue(orchestrator)
    queue.subscribe(print_event)
    queue.start()

    targets = person_ids or [p.id for p in store.get_people()]
    job_ids = [queue.enqueue(person_id) for person_id in targets]
    await queue.join()
    await queue.stop()

    print(f"\n{'='*50}")
    print("RESULTS:")
    print(f"{'='*50}")
    for job_id in job_ids:
        job = queue.get_job(job_id)
        person = store.get_person(job.person_id)
        name = person.full_name if person else job.person_id
        print(f"\n{name} [{job.status.value}]")
        if job.result is not None:
            for field_name, value in job.result.to_dict().items():
                print(f"  {field_name}: {value}")
        if job.error:
            print(f"  error: {job.error}")


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=host, port=port)


def main():
    parser = argparse.ArgumentParser(description="Prospect research enrichment pipeline")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Enrich seeded people and print progress")
    run_parser.add_argument("--person-id", "-p", action="append", default=[], help="Person to enrich (repeatable)")
    run_parser.add_argument("--latency", type=float, default=settings.search_latency_seconds, help="Simulated search latency in seconds")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()

    if args.command == "serve":
        serve(args.host, args.port)
    else:
        asyncio.run(
            run_research(
                getattr(args, "person_id", []),
                getattr(args, "latency", settings.search_latency_seconds),
            )
        )


if __name__ == "__main__":
    main()
