"""
Error hierarchy for the searchcore client.

Everything raised by the library derives from ``SearchClientError`` so callers
can catch a single base class. Operation-level task failures are *not* errors:
a task that ends in ``failed`` is returned by ``wait_for_task`` and the caller
inspects ``task.status``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SearchClientError(Exception):
    """Base class for all searchcore errors."""


# ---------------------------------------------------------------------------
# Transport / server errors
# ---------------------------------------------------------------------------

class CommunicationError(SearchClientError):
    """The request never produced an HTTP response (DNS, refused, reset...)."""

    def __init__(self, message: str, *, method: str = "", path: str = ""):
        super().__init__(message)
        self.method = method
        self.path = path


class RequestTimeoutError(CommunicationError):
    """The HTTP request exceeded the configured transport timeout."""


class CircuitOpenError(SearchClientError):
    """Raised while the circuit breaker refuses calls."""


class ApiError(SearchClientError):
    """
    Non-2xx response from the search service.

    The service answers errors with a JSON body of the shape
    ``{"message", "code", "type", "link"}``; whatever is present is exposed
    as attributes.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        *,
        code: Optional[str] = None,
        type: Optional[str] = None,
        link: Optional[str] = None,
        body: Any = None,
    ):
        self.status_code = status_code
        self.message = message
        self.code = code
        self.type = type
        self.link = link
        self.body = body
        super().__init__(self._render())

    def _render(self) -> str:
        parts = [f"status={self.status_code}"]
        if self.code:
            parts.append(f"code={self.code}")
        if self.message:
            parts.append(self.message)
        return "API error: " + " ".join(parts)

    @classmethod
    def from_response(cls, status_code: int, body: Any) -> "ApiError":
        if isinstance(body, dict):
            return cls(
                status_code,
                str(body.get("message", "")),
                code=body.get("code"),
                type=body.get("type"),
                link=body.get("link"),
                body=body,
            )
        return cls(status_code, str(body or ""), body=body)


# ---------------------------------------------------------------------------
# Task waiting
# ---------------------------------------------------------------------------

class TaskTimeoutError(SearchClientError):
    """
    The wait for a task ended before a terminal status was observed.

    The task keeps running server-side; callers may re-poll later with
    ``task_uid``.
    """

    def __init__(
        self,
        task_uid: int,
        last_status: Optional[str] = None,
        *,
        cancelled: bool = False,
        waited: float = 0.0,
    ):
        self.task_uid = task_uid
        self.last_status = last_status
        self.cancelled = cancelled
        self.waited = waited
        reason = "cancelled" if cancelled else "timed out"
        super().__init__(
            f"Waiting for task {task_uid} {reason} after {waited:.3f}s "
            f"(last status: {last_status or 'unknown'})"
        )


# ---------------------------------------------------------------------------
# Tenant token validation
# ---------------------------------------------------------------------------

class TenantTokenError(SearchClientError, ValueError):
    """Base class for tenant token validation failures."""


class MissingSigningKeyError(TenantTokenError):
    def __init__(self):
        super().__init__("An API key is required to sign a tenant token")


class MissingSearchRulesError(TenantTokenError):
    def __init__(self):
        super().__init__("Search rules must be provided to generate a tenant token")


class ExpiredTokenError(TenantTokenError):
    def __init__(self, expires_at: Any):
        self.expires_at = expires_at
        super().__init__(f"Tenant token expiration must be in the future (got {expires_at})")


class InvalidApiKeyUidError(TenantTokenError):
    def __init__(self, api_key_uid: Any):
        self.api_key_uid = api_key_uid
        super().__init__(f"Invalid API key uid: {api_key_uid!r}")


def error_summary(exc: BaseException) -> Dict[str, Any]:
    """Flatten an exception into a JSON-friendly dict (used by the CLI)."""
    out: Dict[str, Any] = {"error": exc.__class__.__name__, "message": str(exc)}
    if isinstance(exc, ApiError):
        out.update({"status_code": exc.status_code, "code": exc.code, "type": exc.type})
    elif isinstance(exc, TaskTimeoutError):
        out.update({"task_uid": exc.task_uid, "last_status": exc.last_status})
    return out
