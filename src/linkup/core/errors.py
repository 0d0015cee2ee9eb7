"""Domain errors raised by the service layer.

Each error carries the HTTP status the API layer reports it with, so services
stay free of FastAPI imports while endpoints keep a single translation point.
"""

from __future__ import annotations

from fastapi import status


class LinkupError(Exception):
    """Base class for structured failures reported to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(LinkupError):
    """A referenced user, post, story or request does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class InvalidTargetError(LinkupError):
    """A user tried to follow or connect to themselves."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid target"


class RateLimitedError(LinkupError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Rate limit exceeded"


class UnauthorizedError(LinkupError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class ForbiddenError(LinkupError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class ValidationFailedError(LinkupError):
    """Input that is well-formed JSON but violates a domain rule."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid input"
