"""Error types for upstream calls and their sanitized messages.

Messages attached to these exceptions are safe to return to callers: they
never include upstream response bodies, request headers, or the credential.
"""

import httpx


class UpstreamError(Exception):
    """Base class for failures talking to the upstream photo-search API."""

    status_code = 502
    retryable = False
    public_message = "Photo search is temporarily unavailable"

    def __init__(self, message: str | None = None, upstream_status: int | None = None):
        self.message = message or self.public_message
        self.upstream_status = upstream_status
        super().__init__(self.message)


class UpstreamUnavailable(UpstreamError):
    """Network failure, timeout, or non-4xx error status from upstream."""

    status_code = 503
    retryable = True


class UpstreamRejected(UpstreamError):
    """Upstream refused the request (4xx: bad credential, quota exceeded)."""

    status_code = 502
    retryable = False
    public_message = "Photo search is currently unavailable"


class UpstreamProtocolError(UpstreamError):
    """Upstream answered with a body we cannot interpret."""

    status_code = 502
    retryable = False
    public_message = "Photo search failed"


class ClientInputError(ValueError):
    """Caller input that cannot be corrected by clamping."""


def sanitize_upstream_error(e: Exception) -> str:
    """Return a safe error message that never leaks tokens or credentials.

    httpx exceptions can contain Authorization headers and full URLs with
    query parameters in their string representations. This function returns
    only generic, safe messages.
    """
    if isinstance(e, httpx.TimeoutException):
        return "Upstream API timeout"
    if isinstance(e, httpx.ConnectError):
        return "Upstream API connection failed"
    if isinstance(e, httpx.HTTPStatusError):
        return f"Upstream API error: HTTP {e.response.status_code}"
    if isinstance(e, httpx.HTTPError):
        return "Upstream API error"
    if isinstance(e, UpstreamError):
        if e.upstream_status is not None:
            return f"{type(e).__name__}: HTTP {e.upstream_status}"
        return type(e).__name__
    return "Upstream request failed"
