"""Buildkite client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_URL = "https://api.buildkite.com"


@dataclass
class BuildkiteConfig:
    """Configuration for the Buildkite client, loaded from environment variables."""

    url: str = DEFAULT_URL
    token: str = ""
    read_only: bool = False
    timeout: int = 30
    ssl_verify: bool = True

    @classmethod
    def from_env(cls) -> BuildkiteConfig:
        url = os.getenv("BUILDKITE_URL", DEFAULT_URL).rstrip("/")
        token = os.getenv("BUILDKITE_API_TOKEN") or os.getenv("BUILDKITE_TOKEN", "")
        read_only = os.getenv("BUILDKITE_READ_ONLY", "false").lower() in (
            "true",
            "1",
            "yes",
        )
        timeout = int(os.getenv("BUILDKITE_TIMEOUT", "30"))
        ssl_verify = os.getenv("BUILDKITE_SSL_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

        return cls(
            url=url,
            token=token,
            read_only=read_only,
            timeout=timeout,
            ssl_verify=ssl_verify,
        )

    @property
    def api_url(self) -> str:
        return f"{self.url}/v2"

    def validate(self) -> None:
        if not self.url:
            msg = "BUILDKITE_URL must not be empty"
            raise ValueError(msg)
        if not self.token:
            msg = "Buildkite token is required. Set BUILDKITE_API_TOKEN or BUILDKITE_TOKEN"
            raise ValueError(msg)
