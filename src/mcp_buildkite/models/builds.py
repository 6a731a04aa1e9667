"""Build models: the build resource, its create payload and list filters."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import BuildkiteModel
from .common import Creator, ListOptions
from .jobs import Job
from .pipelines import Pipeline

FINISHED_STATES = frozenset({"passed", "failed", "canceled", "skipped", "not_run"})


class Author(BuildkiteModel):
    """Author of a commit, used when creating a build."""

    model_config = {**BuildkiteModel.model_config, "extra": "forbid"}

    name: str | None = None
    email: str | None = None


class CreateBuild(BuildkiteModel):
    model_config = {**BuildkiteModel.model_config, "extra": "forbid"}

    commit: str
    branch: str
    message: str

    author: Author | None = None
    env: dict[str, str] | None = None
    meta_data: dict[str, str] | None = None
    ignore_pipeline_branch_filters: bool = False
    pull_request_base_branch: str | None = None
    pull_request_id: int | None = None
    pull_request_repository: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Request body: required keys always, optional keys only when non-empty."""
        payload: dict[str, Any] = {
            "commit": self.commit,
            "branch": self.branch,
            "message": self.message,
        }
        if self.author is not None:
            author = self.author.model_dump(exclude_none=True)
            author = {k: v for k, v in author.items() if v}
            if author:
                payload["author"] = author
        optional = self.model_dump(
            exclude={"commit", "branch", "message", "author"}, exclude_none=True
        )
        payload.update({k: v for k, v in optional.items() if v})
        return payload


class PullRequest(BuildkiteModel):
    id: str | None = None
    base: str | None = None
    repository: str | None = None


class Build(BuildkiteModel):
    """A single run of a pipeline. Any field may be missing from a response."""

    id: str | None = None
    url: str | None = None
    web_url: str | None = None
    number: int | None = None
    state: str | None = None
    blocked: bool | None = None
    message: str | None = None
    commit: str | None = None
    branch: str | None = None
    env: dict[str, Any] | None = None
    created_at: datetime | None = None
    scheduled_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    meta_data: Any = None
    creator: Creator | None = None
    jobs: list[Job] | None = None
    pipeline: Pipeline | None = None
    pull_request: PullRequest | None = None

    @property
    def is_finished(self) -> bool:
        return self.state in FINISHED_STATES


class BuildsListOptions(ListOptions):
    """Filters accepted by the build list endpoints."""

    creator: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
    finished_from: datetime | None = None
    # running, scheduled, passed, failed, blocked, canceled, canceling, skipped, not_run, finished
    state: list[str] | None = None
    branch: str | None = None
    commit: str | None = None
