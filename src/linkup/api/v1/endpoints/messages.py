"""Direct message endpoints for the Linkup API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import StreamingResponse

from linkup.core.errors import ForbiddenError
from linkup.models import Message
from linkup.schemas.message import MessageCreate, MessageResponse
from linkup.services import messaging
from linkup.services.realtime import channel_frames

from ..dependencies import CurrentUserDep, HubDep, SessionDep, StreamUserDep

router = APIRouter(prefix="/messages", tags=["messages"])

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Stop nginx-style proxies from buffering the event stream.
    "X-Accel-Buffering": "no",
}


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
async def send_message(
    message_data: MessageCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    hub: HubDep,
) -> Message:
    """Send a direct message and push it to the recipient if they are listening."""
    return messaging.send_message(
        db,
        hub,
        current_user.user_id,
        message_data.to_user_id,
        text=message_data.text,
        media_url=message_data.media_url,
        message_type=message_data.message_type,
    )


@router.get("/thread/{user_id}", response_model=list[MessageResponse])
async def get_thread(user_id: str, current_user: CurrentUserDep, db: SessionDep) -> list[Message]:
    """Return the conversation with ``user_id`` and mark received messages seen."""
    return messaging.get_thread(db, current_user.user_id, user_id)


@router.get("/recent", response_model=list[MessageResponse])
async def get_recent_messages(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(20, ge=1, le=100),
) -> list[Message]:
    """Latest message from each user who wrote to the caller."""
    return messaging.recent_messages(db, current_user.user_id, limit=limit)


@router.get("/stream/{user_id}")
async def stream_messages(
    user_id: str,
    current_user: StreamUserDep,
    hub: HubDep,
) -> StreamingResponse:
    """Open the caller's live message channel as a server-sent event stream.

    Only the authenticated user may subscribe to their own channel.
    """
    if user_id != current_user.user_id:
        raise ForbiddenError("You can only subscribe to your own message stream")

    handle = hub.open_channel(user_id)
    return StreamingResponse(
        channel_frames(hub, handle),
        media_type="text/event-stream",
        headers=_STREAM_HEADERS,
    )
