"""Tool-level tests: call @mcp.tool functions via FastMCP Client with mocked API."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import respx
from fastmcp import Client, FastMCP
from httpx import Response

from mcp_buildkite.client import BuildkiteClient
from mcp_buildkite.config import BuildkiteConfig

TEST_URL = "https://api.buildkite.example.com"
TEST_TOKEN = "test-token"

BUILD = {"id": "b-1", "number": 7, "state": "running", "branch": "main"}


def _make_mcp(*, read_only: bool = False) -> tuple[FastMCP, Any]:
    """Swap the real server's lifespan for one with a test client."""
    config = BuildkiteConfig(url=TEST_URL, token=TEST_TOKEN, read_only=read_only)
    client = BuildkiteClient(config)

    @asynccontextmanager
    async def mock_lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        try:
            yield {"client": client, "config": config}
        finally:
            await client.close()

    from mcp_buildkite.servers.buildkite import mcp

    original_lifespan = mcp._lifespan
    mcp._lifespan = mock_lifespan
    return mcp, original_lifespan


@pytest.fixture
async def tool_client():
    mcp, original_lifespan = _make_mcp()
    with respx.mock(base_url=f"{TEST_URL}/v2") as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan


@pytest.fixture
async def readonly_client():
    mcp, original_lifespan = _make_mcp(read_only=True)
    with respx.mock(base_url=f"{TEST_URL}/v2") as router:
        async with Client(mcp) as client:
            yield client, router
    mcp._lifespan = original_lifespan


def _parse(result: Any) -> dict | list:
    """Extract JSON from a tool call result."""
    if hasattr(result, "content"):
        for item in result.content:
            if hasattr(item, "text"):
                return json.loads(item.text)
    if hasattr(result, "__iter__") and not isinstance(result, (str, dict)):
        for item in result:
            if hasattr(item, "text"):
                return json.loads(item.text)
    return json.loads(str(result))


# ═══════════════════════════════════════════════════════
# Read tools
# ═══════════════════════════════════════════════════════


class TestListBuilds:
    async def test_all_builds(self, tool_client):
        client, router = tool_client
        route = router.get("/builds").mock(return_value=Response(200, json=[BUILD]))
        parsed = _parse(await client.call_tool("buildkite_list_builds", {}))
        assert parsed["count"] == 1
        assert parsed["items"][0]["number"] == 7
        assert parsed["has_more"] is False
        assert route.calls.last.request.url.query == b""

    async def test_by_pipeline_with_filters(self, tool_client):
        client, router = tool_client
        link = f'<{TEST_URL}/v2/organizations/acme/pipelines/widget-ci/builds?page=2>; rel="next"'
        route = router.get("/organizations/acme/pipelines/widget-ci/builds").mock(
            return_value=Response(200, json=[BUILD], headers={"Link": link})
        )
        result = await client.call_tool(
            "buildkite_list_builds",
            {"org": "acme", "pipeline": "widget-ci", "branch": "main", "state": ["running"]},
        )
        parsed = _parse(result)
        params = route.calls.last.request.url.params
        assert params["branch"] == "main"
        assert params.get_list("state[]") == ["running"]
        assert parsed["has_more"] is True
        assert parsed["next_page"] == 2

    async def test_by_org(self, tool_client):
        client, router = tool_client
        route = router.get("/organizations/acme/builds").mock(return_value=Response(200, json=[]))
        parsed = _parse(await client.call_tool("buildkite_list_builds", {"org": "acme"}))
        assert route.called
        assert parsed["items"] == []

    async def test_pipeline_requires_org(self, tool_client):
        client, _ = tool_client
        parsed = _parse(await client.call_tool("buildkite_list_builds", {"pipeline": "widget-ci"}))
        assert "requires org" in parsed["error"]


    async def test_naive_datetime_rejected(self, tool_client):
        client, router = tool_client
        result = await client.call_tool(
            "buildkite_list_builds", {"created_from": "2024-01-02T03:04:05"}
        )
        assert "timezone-aware" in _parse(result)["error"]
        assert not router.calls


class TestGetBuild:
    async def test_happy_path(self, tool_client):
        client, router = tool_client
        router.get("/organizations/acme/pipelines/widget-ci/builds/7").mock(
            return_value=Response(200, json=BUILD)
        )
        result = await client.call_tool(
            "buildkite_get_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        assert _parse(result) == BUILD

    async def test_not_found(self, tool_client):
        client, router = tool_client
        router.get("/organizations/acme/pipelines/widget-ci/builds/99").mock(
            return_value=Response(404, json={"message": "No build found"})
        )
        result = await client.call_tool(
            "buildkite_get_build", {"org": "acme", "pipeline": "widget-ci", "number": 99}
        )
        parsed = _parse(result)
        assert parsed["status_code"] == 404
        assert "Verify" in parsed["hint"]

    async def test_auth_error(self, tool_client):
        client, router = tool_client
        router.get("/organizations/acme/pipelines/widget-ci/builds/7").mock(
            return_value=Response(401, json={"message": "Authentication required"})
        )
        result = await client.call_tool(
            "buildkite_get_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        assert "BUILDKITE_API_TOKEN" in _parse(result)["hint"]


# ═══════════════════════════════════════════════════════
# Write tools
# ═══════════════════════════════════════════════════════


class TestWriteTools:
    async def test_create_build(self, tool_client):
        client, router = tool_client
        route = router.post("/organizations/acme/pipelines/widget-ci/builds").mock(
            return_value=Response(201, json={**BUILD, "state": "scheduled"})
        )
        result = await client.call_tool(
            "buildkite_create_build",
            {
                "org": "acme",
                "pipeline": "widget-ci",
                "commit": "HEAD",
                "branch": "main",
                "message": "deploy",
                "author_name": "Jo",
            },
        )
        assert _parse(result)["state"] == "scheduled"
        assert json.loads(route.calls.last.request.content) == {
            "commit": "HEAD",
            "branch": "main",
            "message": "deploy",
            "author": {"name": "Jo"},
        }

    async def test_create_build_for_pull_request(self, tool_client):
        client, router = tool_client
        route = router.post("/organizations/acme/pipelines/widget-ci/builds").mock(
            return_value=Response(201, json=BUILD)
        )
        await client.call_tool(
            "buildkite_create_build",
            {
                "org": "acme",
                "pipeline": "widget-ci",
                "commit": "abc123",
                "branch": "feature",
                "pull_request_id": 42,
                "pull_request_base_branch": "main",
                "pull_request_repository": "git@example.com:fork/widget.git",
            },
        )
        body = json.loads(route.calls.last.request.content)
        assert body["pull_request_id"] == 42
        assert body["pull_request_base_branch"] == "main"
        assert body["pull_request_repository"] == "git@example.com:fork/widget.git"

    async def test_cancel_build(self, tool_client):
        client, router = tool_client
        router.put("/organizations/acme/pipelines/widget-ci/builds/7/cancel").mock(
            return_value=Response(200, json={**BUILD, "state": "canceling"})
        )
        result = await client.call_tool(
            "buildkite_cancel_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        assert _parse(result)["state"] == "canceling"

    async def test_cancel_unprocessable(self, tool_client):
        client, router = tool_client
        router.put("/organizations/acme/pipelines/widget-ci/builds/7/cancel").mock(
            return_value=Response(422, json={"message": "Build can't be canceled"})
        )
        result = await client.call_tool(
            "buildkite_cancel_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        parsed = _parse(result)
        assert parsed["status_code"] == 422
        assert "Validation failed" in parsed["hint"]

    async def test_rebuild_build(self, tool_client):
        client, router = tool_client
        router.put("/organizations/acme/pipelines/widget-ci/builds/7/rebuild").mock(
            return_value=Response(200, json={**BUILD, "number": 8})
        )
        result = await client.call_tool(
            "buildkite_rebuild_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        assert _parse(result)["number"] == 8


class TestReadOnlyMode:
    async def test_create_blocked(self, readonly_client):
        client, router = readonly_client
        result = await client.call_tool(
            "buildkite_create_build",
            {"org": "acme", "pipeline": "widget-ci", "commit": "HEAD", "branch": "main"},
        )
        parsed = _parse(result)
        assert "read-only" in parsed["hint"].lower()
        assert not router.calls

    async def test_cancel_blocked(self, readonly_client):
        client, _ = readonly_client
        result = await client.call_tool(
            "buildkite_cancel_build", {"org": "acme", "pipeline": "widget-ci", "number": 7}
        )
        assert "read-only" in _parse(result)["hint"].lower()

    async def test_read_still_works(self, readonly_client):
        client, router = readonly_client
        router.get("/builds").mock(return_value=Response(200, json=[BUILD]))
        parsed = _parse(await client.call_tool("buildkite_list_builds", {}))
        assert parsed["count"] == 1
