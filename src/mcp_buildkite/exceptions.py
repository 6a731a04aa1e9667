"""Buildkite API exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import Response


class BuildkiteError(Exception):
    """Base exception for Buildkite operations."""


class BuildkiteTransportError(BuildkiteError):
    """Raised when the request never produced an HTTP response."""


class BuildkiteApiError(BuildkiteError):
    """Raised when the Buildkite API returns a non-success response.

    The raw ``response`` is kept so callers can still inspect status and
    headers after a failure.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str,
        body: str = "",
        response: Response | None = None,
    ) -> None:
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.response = response
        super().__init__(f"Buildkite API Error {status_code} {status_text}: {body}")


class BuildkiteAuthError(BuildkiteApiError):
    """Raised on 401/403 authentication failures."""

    def __init__(self, status_code: int, body: str = "", response: Response | None = None) -> None:
        status_text = "Unauthorized" if status_code == 401 else "Forbidden"
        super().__init__(status_code, status_text, body, response)


class BuildkiteNotFoundError(BuildkiteApiError):
    """Raised on 404 responses."""

    def __init__(self, body: str = "", response: Response | None = None) -> None:
        super().__init__(404, "Not Found", body, response)


class BuildkiteDecodeError(BuildkiteApiError):
    """Raised when a success response body cannot be decoded into the expected shape."""


class BuildkiteWriteDisabledError(BuildkiteError):
    """Raised when a write operation is attempted in read-only mode."""

    def __init__(self) -> None:
        super().__init__("Write operations are disabled (BUILDKITE_READ_ONLY=true)")
