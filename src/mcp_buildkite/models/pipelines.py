"""Pipeline models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import BuildkiteModel


class Pipeline(BuildkiteModel):
    id: str | None = None
    url: str | None = None
    web_url: str | None = None
    name: str | None = None
    slug: str | None = None
    description: str | None = None
    repository: str | None = None
    default_branch: str | None = None
    branch_configuration: str | None = None
    provider: dict[str, Any] | None = None
    builds_url: str | None = None
    badge_url: str | None = None
    created_at: datetime | None = None
    scheduled_builds_count: int | None = None
    running_builds_count: int | None = None
    scheduled_jobs_count: int | None = None
    running_jobs_count: int | None = None
    waiting_jobs_count: int | None = None
