"""Shared API dependencies for authentication and process-wide services."""

from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from linkup.core.errors import UnauthorizedError
from linkup.core.security import decode_access_token
from linkup.db.session import get_db
from linkup.models import User
from linkup.services.events import EventTrigger
from linkup.services.realtime import DeliveryHub
from linkup.services.users import ensure_user

# Missing credentials are reported as 401 by get_current_user rather than
# FastAPI's default 403.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
BearerDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _user_from_token(token: str | None, db: Session) -> User:
    if not token:
        raise UnauthorizedError("Not authenticated")
    claims = decode_access_token(token)
    return ensure_user(db, claims["sub"], claims)


def get_current_user(credentials: BearerDep, db: SessionDep) -> User:
    """Resolve the caller from the identity provider's bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        The caller's User, created on first contact.

    Raises:
        UnauthorizedError: If the token is missing or invalid.
    """
    return _user_from_token(credentials.credentials if credentials else None, db)


def get_stream_user(
    credentials: BearerDep,
    db: SessionDep,
    access_token: Annotated[str | None, Query(description="Token for EventSource clients")] = None,
) -> User:
    """Like :func:`get_current_user`, also accepting the token as a query parameter."""
    token = credentials.credentials if credentials else access_token
    return _user_from_token(token, db)


def get_delivery_hub(request: Request) -> DeliveryHub:
    """Return the hub created at application startup."""
    return request.app.state.delivery_hub


def get_event_trigger(request: Request) -> EventTrigger:
    """Return the lifecycle event trigger created at application startup."""
    return request.app.state.event_trigger


# Type aliases for dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
StreamUserDep = Annotated[User, Depends(get_stream_user)]
HubDep = Annotated[DeliveryHub, Depends(get_delivery_hub)]
TriggerDep = Annotated[EventTrigger, Depends(get_event_trigger)]
