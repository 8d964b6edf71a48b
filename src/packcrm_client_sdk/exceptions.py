from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    request_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        request = f" request_id={self.request_id}" if self.request_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{request}"

    @property
    def server_message(self) -> str | None:
        """Message supplied by the server body, if any."""
        if isinstance(self.raw_payload, dict):
            message = self.raw_payload.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        return None


class UnauthorizedError(ApiError):
    pass


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class AuthError(UnauthorizedError):
    """Authentication failed or session is invalid."""


class PermissionError(ForbiddenError):
    """Authorization denied for the tenant or role."""


class ConflictError(ApiError):
    """409 or conflict-style errors."""


class RateLimitError(ApiError):
    """429 throttling error."""


class ServerError(ApiError):
    """5xx server-side failures."""


class TransportError(ApiError):
    """Network/transport failure before an HTTP response was returned."""


@dataclass
class ValidationIssue:
    field: str
    reason: str


@dataclass
class ClientValidationError(Exception):
    issues: list[ValidationIssue] = field(default_factory=list)

    def __str__(self) -> str:
        return "; ".join(f"{issue.field}: {issue.reason}" for issue in self.issues)


class CommandFailedError(Exception):
    """A gateway command settled with a failure.

    ``message`` is the same text the gateway stored in the slice's ``error``.
    """

    def __init__(self, message: str, *, resource: str, command: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.command = command
        self.cause = cause


class ProtectedPrincipalError(Exception):
    """Mutation attempted against the platform-owner account."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User {user_id} is a protected platform principal")
        self.user_id = user_id
