"""Base model for Buildkite API resources."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class BuildkiteModel(BaseModel):
    """Base model with common behavior for all Buildkite API models."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        """Re-encode only the fields that were present when the model was built.

        Explicit nulls survive, absent keys stay absent.
        """
        return self.model_dump(mode="json", exclude_unset=True)
