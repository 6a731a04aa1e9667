"""Buildkite MCP server: build tool registrations."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import Field

from ..client import BuildkiteClient, Response
from ..config import BuildkiteConfig
from ..exceptions import (
    BuildkiteApiError,
    BuildkiteAuthError,
    BuildkiteDecodeError,
    BuildkiteNotFoundError,
    BuildkiteTransportError,
    BuildkiteWriteDisabledError,
)
from ..models.builds import Author, Build, BuildsListOptions, CreateBuild


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    config = BuildkiteConfig.from_env()
    config.validate()
    client = BuildkiteClient(config)
    try:
        yield {"client": client, "config": config}
    finally:
        await client.close()


mcp = FastMCP(
    name="Buildkite MCP Server",
    instructions=(
        "Provides tools for the Buildkite REST API: list, inspect, create,"
        " cancel and rebuild builds."
    ),
    lifespan=lifespan,
)


def _get_client(ctx: Context) -> BuildkiteClient:
    return ctx.request_context.lifespan_context["client"]


def _get_config(ctx: Context) -> BuildkiteConfig:
    return ctx.request_context.lifespan_context["config"]


def _check_write(ctx: Context) -> None:
    if _get_config(ctx).read_only:
        raise BuildkiteWriteDisabledError


def _ok(build: Build) -> str:
    return json.dumps(build.to_dict(), indent=2, ensure_ascii=False)


def _paginated(builds: list[Build], resp: Response) -> str:
    """Wrap a list response with the page links from the Link header."""
    return json.dumps(
        {
            "items": [b.to_dict() for b in builds],
            "count": len(builds),
            "next_page": resp.next_page or None,
            "last_page": resp.last_page or None,
            "has_more": resp.next_page > 0,
        },
        indent=2,
        ensure_ascii=False,
    )


def _err(error: Exception) -> str:
    detail: dict[str, Any] = {"error": str(error)}
    if isinstance(error, BuildkiteNotFoundError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
        detail["hint"] = (
            "Verify the organization slug, pipeline slug and build number."
            " Use buildkite_list_builds to find them."
        )
    elif isinstance(error, BuildkiteAuthError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
        detail["hint"] = (
            "Check BUILDKITE_API_TOKEN scopes. Reads need 'read_builds', writes need 'write_builds'."
        )
    elif isinstance(error, BuildkiteWriteDisabledError):
        detail["hint"] = (
            "Server is in read-only mode. Set BUILDKITE_READ_ONLY=false to enable writes."
        )
    elif isinstance(error, BuildkiteDecodeError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
        detail["hint"] = "Unexpected response body. Check BUILDKITE_URL points at the REST API."
    elif isinstance(error, BuildkiteApiError):
        detail["status_code"] = error.status_code
        detail["body"] = error.body
        if error.status_code == 422:
            detail["hint"] = "Validation failed. The build may already be finished or not exist."
        elif error.status_code == 429:
            detail["hint"] = "Rate limited. Wait before retrying."
    elif isinstance(error, BuildkiteTransportError):
        detail["hint"] = "Network failure talking to Buildkite. Check connectivity and BUILDKITE_URL."
    return json.dumps(detail, indent=2, ensure_ascii=False)


OrgSlug = Annotated[str, Field(description="Organization slug (e.g. 'acme')", min_length=1)]
PipelineSlug = Annotated[str, Field(description="Pipeline slug (e.g. 'widget-ci')", min_length=1)]
BuildNumber = Annotated[int, Field(description="Build number within the pipeline", ge=1)]


# ════════════════════════════════════════════════════════════════════
# Builds
# ════════════════════════════════════════════════════════════════════


@mcp.tool(
    tags={"buildkite", "builds", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def buildkite_list_builds(
    ctx: Context,
    org: Annotated[
        str | None, Field(description="Limit to one organization (slug)")
    ] = None,
    pipeline: Annotated[
        str | None, Field(description="Limit to one pipeline (slug); requires org")
    ] = None,
    branch: Annotated[str | None, Field(description="Filter by branch name")] = None,
    commit: Annotated[str | None, Field(description="Filter by full commit SHA")] = None,
    state: Annotated[
        list[str] | None,
        Field(description="Filter by state (running, scheduled, passed, failed, canceled, ...)"),
    ] = None,
    creator: Annotated[str | None, Field(description="Filter by creator user ID")] = None,
    created_from: Annotated[
        datetime | None,
        Field(description="Only builds created at or after (ISO 8601 with offset)"),
    ] = None,
    created_to: Annotated[
        datetime | None,
        Field(description="Only builds created before (ISO 8601 with offset)"),
    ] = None,
    finished_from: Annotated[
        datetime | None,
        Field(description="Only builds finished at or after (ISO 8601 with offset)"),
    ] = None,
    page: Annotated[int | None, Field(description="Page number", ge=1)] = None,
    per_page: Annotated[
        int | None, Field(description="Results per page (1-100)", ge=1, le=100)
    ] = None,
) -> str:
    """List builds, optionally scoped to an organization or pipeline."""
    try:
        if pipeline and not org:
            msg = "pipeline requires org"
            raise ValueError(msg)
        options = BuildsListOptions(
            branch=branch,
            commit=commit,
            state=state,
            creator=creator,
            created_from=created_from,
            created_to=created_to,
            finished_from=finished_from,
            page=page,
            per_page=per_page,
        )
        service = _get_client(ctx).builds
        if org and pipeline:
            builds, resp = await service.list_by_pipeline(org, pipeline, options)
        elif org:
            builds, resp = await service.list_by_org(org, options)
        else:
            builds, resp = await service.list(options)
        return _paginated(builds, resp)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"buildkite", "builds", "read"},
    annotations={"readOnlyHint": True, "idempotentHint": True, "openWorldHint": True},
)
async def buildkite_get_build(
    ctx: Context,
    org: OrgSlug,
    pipeline: PipelineSlug,
    number: BuildNumber,
) -> str:
    """Get one build, including its jobs."""
    try:
        build, _ = await _get_client(ctx).builds.get(org, pipeline, number)
        return _ok(build)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"buildkite", "builds", "write"},
    annotations={"readOnlyHint": False, "openWorldHint": True},
)
async def buildkite_create_build(
    ctx: Context,
    org: OrgSlug,
    pipeline: PipelineSlug,
    commit: Annotated[str, Field(description="Commit SHA or 'HEAD'", min_length=1)],
    branch: Annotated[str, Field(description="Branch to build", min_length=1)],
    message: Annotated[str, Field(description="Build message")] = "",
    author_name: Annotated[str | None, Field(description="Commit author name")] = None,
    author_email: Annotated[str | None, Field(description="Commit author email")] = None,
    env: Annotated[
        dict[str, str] | None, Field(description="Environment variables for the build")
    ] = None,
    meta_data: Annotated[
        dict[str, str] | None, Field(description="Meta-data key/value pairs")
    ] = None,
    ignore_pipeline_branch_filters: Annotated[
        bool, Field(description="Run even if the pipeline's branch filters exclude the branch")
    ] = False,
    pull_request_id: Annotated[
        int | None, Field(description="Pull request number the build is for", ge=1)
    ] = None,
    pull_request_base_branch: Annotated[
        str | None, Field(description="Base branch of the pull request")
    ] = None,
    pull_request_repository: Annotated[
        str | None, Field(description="Repository URL of the pull request, if it differs")
    ] = None,
) -> str:
    """Create (trigger) a new build."""
    try:
        _check_write(ctx)
        author = None
        if author_name or author_email:
            author = Author(name=author_name, email=author_email)
        create_build = CreateBuild(
            commit=commit,
            branch=branch,
            message=message,
            author=author,
            env=env,
            meta_data=meta_data,
            ignore_pipeline_branch_filters=ignore_pipeline_branch_filters,
            pull_request_id=pull_request_id,
            pull_request_base_branch=pull_request_base_branch,
            pull_request_repository=pull_request_repository,
        )
        build, _ = await _get_client(ctx).builds.create(org, pipeline, create_build)
        return _ok(build)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"buildkite", "builds", "write"},
    annotations={"destructiveHint": True, "readOnlyHint": False, "openWorldHint": True},
)
async def buildkite_cancel_build(
    ctx: Context,
    org: OrgSlug,
    pipeline: PipelineSlug,
    number: BuildNumber,
) -> str:
    """Cancel a scheduled or running build."""
    try:
        _check_write(ctx)
        build, _ = await _get_client(ctx).builds.cancel(org, pipeline, number)
        return _ok(build)
    except Exception as e:
        return _err(e)


@mcp.tool(
    tags={"buildkite", "builds", "write"},
    annotations={"readOnlyHint": False, "openWorldHint": True},
)
async def buildkite_rebuild_build(
    ctx: Context,
    org: OrgSlug,
    pipeline: PipelineSlug,
    number: BuildNumber,
) -> str:
    """Rebuild a finished build. Returns the new build."""
    try:
        _check_write(ctx)
        build, _ = await _get_client(ctx).builds.rebuild(org, pipeline, number)
        return _ok(build)
    except Exception as e:
        return _err(e)
