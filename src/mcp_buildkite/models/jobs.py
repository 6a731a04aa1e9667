"""Job models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import BuildkiteModel


class Job(BuildkiteModel):
    id: str | None = None
    type: str | None = None
    name: str | None = None
    step_key: str | None = None
    state: str | None = None
    command: str | None = None
    agent_query_rules: list[str] | None = None
    web_url: str | None = None
    log_url: str | None = None
    raw_log_url: str | None = None
    artifacts_url: str | None = None
    artifact_paths: str | None = None
    soft_failed: bool | None = None
    exit_status: int | None = None
    agent: dict[str, Any] | None = None
    created_at: datetime | None = None
    scheduled_at: datetime | None = None
    runnable_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    retried: bool | None = None
    retried_in_job_id: str | None = None
    retries_count: int | None = None
    parallel_group_index: int | None = None
    parallel_group_total: int | None = None
