"""Connection request endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from linkup.models import ConnectionRequest
from linkup.schemas.connection import ConnectionRequestResponse, ConnectionsOverview
from linkup.services import connections as workflow

from ..dependencies import CurrentUserDep, SessionDep, TriggerDep

router = APIRouter(prefix="/connections", tags=["connections"])


@router.get("/", response_model=ConnectionsOverview)
async def list_connections(current_user: CurrentUserDep, db: SessionDep) -> ConnectionsOverview:
    """Return the caller's connections, followers, following and incoming requests."""
    summary = workflow.list_connections(db, current_user.user_id)
    return ConnectionsOverview(
        connections=sorted(summary.connections),
        followers=sorted(summary.followers),
        following=sorted(summary.following),
        pending_incoming=[
            ConnectionRequestResponse.model_validate(request)
            for request in summary.pending_incoming
        ],
    )


@router.post(
    "/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=ConnectionRequestResponse,
)
async def request_connection(
    user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
    trigger: TriggerDep,
) -> ConnectionRequest:
    """Send a connection request to ``user_id``."""
    return workflow.request_connection(db, current_user.user_id, user_id, trigger)


@router.post("/{user_id}/accept", response_model=list[ConnectionRequestResponse])
async def accept_connection(
    user_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> list[ConnectionRequest]:
    """Accept the pending request ``user_id`` sent to the caller."""
    return workflow.accept_connection(db, current_user.user_id, user_id)
