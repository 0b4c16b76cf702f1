"""Tests for API routes."""
import asyncio
import json
import time

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app


@pytest.fixture
def app():
    """Create an isolated app with seeded data and instant mock search."""
    settings = Settings(
        search_latency_seconds=0,
        log_file_enabled=False,
        cors_origins="http://localhost:3000",
    )
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sarah(client):
    people = client.get("/api/people").json()["people"]
    return next(p for p in people if p["full_name"] == "Sarah Johnson")


def wait_for_job(client, job_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        job = client.get(f"/api/jobs/{job_id}").json()
        if job["status"] in ("completed", "failed"):
            return job
        time.sleep(0.02)
    raise AssertionError(f"job {job_id} did not finish")


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "prospect-research"
    assert data["timestamp"]


def test_list_people_includes_company(client):
    response = client.get("/api/people")
    assert response.status_code == 200
    people = response.json()["people"]
    assert {p["full_name"] for p in people} == {"Sarah Johnson", "Michael Chen"}
    assert all(p["company"]["name"] == "TechCorp Solutions" for p in people)


def test_get_person(client, sarah):
    response = client.get(f"/api/people/{sarah['id']}")
    assert response.status_code == 200
    assert response.json()["email"] == "sarah.johnson@techcorp.com"


def test_get_unknown_person(client):
    response = client.get("/api/people/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Person not found"


def test_campaigns_and_companies(client):
    campaigns = client.get("/api/campaigns").json()
    companies = client.get("/api/companies").json()

    assert [c["name"] for c in campaigns] == ["Q1 2024 Outreach Campaign"]
    assert campaigns[0]["status"] == "active"
    assert companies[0]["domain"] == "techcorp.com"
    assert companies[0]["campaign_id"] == campaigns[0]["id"]


def test_enrich_unknown_person(client):
    response = client.post("/api/enrich/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Person not found"
    assert client.get("/api/jobs").json()["jobs"] == []


def test_unknown_job(client):
    response = client.get("/api/jobs/job_0_missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Job not found"


def test_unknown_snippet_search_logs(client):
    response = client.get("/api/snippets/missing/search-logs")
    assert response.status_code == 404
    assert response.json()["detail"] == "Context snippet not found"


def test_enrich_runs_job_to_completion(client, sarah):
    response = client.post(f"/api/enrich/{sarah['id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "queued"
    assert body["message"] == "Research job queued successfully"

    job = wait_for_job(client, body["job_id"])
    assert job["status"] == "completed"
    assert job["person_id"] == sarah["id"]
    assert job["progress"]["missing_fields"] == []
    assert job["result"]["company_domain"] == "techcorp.com"
    assert job["result"]["pricing_model"] == "$99/month, $299/month"

    jobs = client.get("/api/jobs").json()["jobs"]
    assert [j["id"] for j in jobs] == [body["job_id"]]

    snippets = client.get(f"/api/snippets/company/{sarah['company_id']}").json()["snippets"]
    assert len(snippets) == 1
    assert snippets[0]["payload"]["key_competitors"] == ["Aws", "Google Cloud", "Azure"]
    assert len(snippets[0]["source_urls"]) == 3

    logs = client.get(f"/api/snippets/{snippets[0]['id']}/search-logs").json()["search_logs"]
    assert [log["iteration"] for log in logs] == [1]
    assert logs[0]["query"] == "TechCorp Solutions company overview products services"

    assert client.get(f"/api/snippets/person/{sarah['id']}").json()["snippets"] == []


def test_jobs_listed_newest_first(client):
    people = client.get("/api/people").json()["people"]
    job_ids = [client.post(f"/api/enrich/{p['id']}").json()["job_id"] for p in people]
    for job_id in job_ids:
        wait_for_job(client, job_id)

    jobs = client.get("/api/jobs").json()["jobs"]
    assert [j["id"] for j in jobs] == list(reversed(job_ids))


@pytest.mark.asyncio
async def test_progress_stream_sends_connected_and_detaches(app):
    """Drive the SSE route over raw ASGI; disconnect after the first message."""
    sent = []
    first_body = asyncio.Event()

    async def receive():
        await first_body.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            first_body.set()

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/api/progress-stream",
        "raw_path": b"/api/progress-stream",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), (b"accept", b"text/event-stream")],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }

    await asyncio.wait_for(app(scope, receive, send), timeout=5)

    start = sent[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 200
    headers = dict(start["headers"])
    assert headers[b"content-type"].startswith(b"text/event-stream")

    body = next(m["body"] for m in sent if m["type"] == "http.response.body" and m.get("body"))
    data_lines = [line for line in body.decode().splitlines() if line.startswith("data: ")]
    event = json.loads(data_lines[0][len("data: "):])
    assert event["type"] == "connected"
    assert "timestamp" in event
    assert "data" not in event

    assert app.state.job_queue.subscriber_count == 0
