"""Shared test fixtures for mcp-buildkite."""

from __future__ import annotations

import pytest
import respx

from mcp_buildkite.client import BuildkiteClient
from mcp_buildkite.config import BuildkiteConfig

TEST_URL = "https://api.buildkite.example.com"
TEST_TOKEN = "test-token"
API_URL = f"{TEST_URL}/v2"


@pytest.fixture
def config() -> BuildkiteConfig:
    return BuildkiteConfig(url=TEST_URL, token=TEST_TOKEN)


@pytest.fixture
async def client(config: BuildkiteConfig):
    bk = BuildkiteClient(config)
    yield bk
    await bk.close()


@pytest.fixture
def mock_api():
    with respx.mock(base_url=API_URL) as router:
        yield router
