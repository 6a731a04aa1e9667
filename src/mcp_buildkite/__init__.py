"""MCP server and async client for the Buildkite builds API."""

import asyncio
import os

import click
from dotenv import load_dotenv


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="MCP transport type",
)
@click.option("--port", default=8000, help="Port for HTTP transports")
@click.option("--host", default="127.0.0.1", help="Host for HTTP transports")
@click.option("--buildkite-url", envvar="BUILDKITE_URL", help="Buildkite API base URL")
@click.option("--buildkite-token", envvar="BUILDKITE_API_TOKEN", help="Buildkite API access token")
@click.option("--read-only", is_flag=True, help="Disable write operations")
def main(
    transport: str,
    port: int,
    host: str,
    buildkite_url: str | None,
    buildkite_token: str | None,
    read_only: bool,
) -> None:
    """Run the Buildkite MCP server."""
    load_dotenv()

    if buildkite_url:
        os.environ["BUILDKITE_URL"] = buildkite_url
    if buildkite_token:
        os.environ["BUILDKITE_API_TOKEN"] = buildkite_token
    if read_only:
        os.environ["BUILDKITE_READ_ONLY"] = "true"

    from .servers.buildkite import mcp

    run_kwargs: dict = {"transport": transport}
    if transport != "stdio":
        run_kwargs["host"] = host
        run_kwargs["port"] = port

    asyncio.run(mcp.run_async(show_banner=False, **run_kwargs))


if __name__ == "__main__":
    main()
