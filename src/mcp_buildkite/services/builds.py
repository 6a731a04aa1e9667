"""Build lifecycle endpoints.

Buildkite API docs: https://buildkite.com/docs/apis/rest-api/builds
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar
from urllib.parse import quote

from pydantic import TypeAdapter, ValidationError

from ..exceptions import BuildkiteDecodeError
from ..models.builds import Build, BuildsListOptions, CreateBuild
from ..options import add_options

if TYPE_CHECKING:
    from ..client import Response

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BUILD = TypeAdapter(Build)
_BUILD_LIST = TypeAdapter(list[Build])


class Transport(Protocol):
    """What a service needs from the client: one request, one wrapped response."""

    async def request(self, method: str, path: str, *, json_data: Any = None) -> Response: ...


def _seg(value: str | int) -> str:
    return quote(str(value), safe="")


def _decode(adapter: TypeAdapter[T], response: Response, empty: Any) -> T:
    # An empty success body (e.g. 204) decodes nothing: an unset Build or no builds.
    data = empty if response.data is None else response.data
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise BuildkiteDecodeError(
            response.status_code,
            f"Response decode error: {e.error_count()} validation error(s)",
            str(e),
            response,
        ) from e


class BuildsService:
    """Build related methods of the Buildkite API.

    Every method performs exactly one round trip and returns the decoded
    result together with the raw :class:`Response`.
    """

    def __init__(self, client: Transport) -> None:
        self.client = client

    @staticmethod
    def _pipeline_builds_path(org: str, pipeline: str) -> str:
        return f"/organizations/{_seg(org)}/pipelines/{_seg(pipeline)}/builds"

    async def cancel(self, org: str, pipeline: str, build: str | int) -> tuple[Build, Response]:
        """Cancel a scheduled or running build."""
        path = f"{self._pipeline_builds_path(org, pipeline)}/{_seg(build)}/cancel"
        resp = await self.client.request("PUT", path)
        return _decode(_BUILD, resp, {}), resp

    async def create(
        self, org: str, pipeline: str, create_build: CreateBuild
    ) -> tuple[Build, Response]:
        """Create a build on *pipeline*."""
        path = self._pipeline_builds_path(org, pipeline)
        resp = await self.client.request("POST", path, json_data=create_build.to_payload())
        build = _decode(_BUILD, resp, {})
        logger.info("Created build %s/%s #%s", org, pipeline, build.number)
        return build, resp

    async def get(self, org: str, pipeline: str, id: str | int) -> tuple[Build, Response]:
        path = f"{self._pipeline_builds_path(org, pipeline)}/{_seg(id)}"
        resp = await self.client.request("GET", path)
        return _decode(_BUILD, resp, {}), resp

    async def list(
        self, options: BuildsListOptions | None = None
    ) -> tuple[list[Build], Response]:
        """List builds across every organization the token can see."""
        return await self._list("/builds", options)

    async def list_by_org(
        self, org: str, options: BuildsListOptions | None = None
    ) -> tuple[list[Build], Response]:
        return await self._list(f"/organizations/{_seg(org)}/builds", options)

    async def list_by_pipeline(
        self, org: str, pipeline: str, options: BuildsListOptions | None = None
    ) -> tuple[list[Build], Response]:
        return await self._list(self._pipeline_builds_path(org, pipeline), options)

    async def rebuild(self, org: str, pipeline: str, build: str | int) -> tuple[Build, Response]:
        """Start a new build with the same commit, branch and message as *build*."""
        path = f"{self._pipeline_builds_path(org, pipeline)}/{_seg(build)}/rebuild"
        resp = await self.client.request("PUT", path)
        return _decode(_BUILD, resp, {}), resp

    async def _list(
        self, path: str, options: BuildsListOptions | None
    ) -> tuple[list[Build], Response]:
        resp = await self.client.request("GET", add_options(path, options))
        return _decode(_BUILD_LIST, resp, []), resp
