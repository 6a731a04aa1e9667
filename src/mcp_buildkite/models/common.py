"""Models shared across Buildkite resources."""

from __future__ import annotations

from datetime import datetime

from .base import BuildkiteModel


class ListOptions(BuildkiteModel):
    """Pagination parameters accepted by every list endpoint."""

    model_config = {**BuildkiteModel.model_config, "extra": "forbid"}

    page: int | None = None
    per_page: int | None = None


class Creator(BuildkiteModel):
    """The user who created a build. Populated by the API only."""

    avatar_url: str | None = None
    created_at: datetime | None = None
    email: str | None = None
    id: str | None = None
    name: str | None = None
