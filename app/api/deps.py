from __future__ import annotations

from fastapi import Request

from app.config import Settings
from app.services.entity_store import EntityStore
from app.services.job_queue import JobQueue


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_job_queue(request: Request) -> JobQueue:
    return request.app.state.job_queue
