# src/linkup/schemas/message.py
"""Direct message-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from linkup.models.message import MessageType


class MessageCreate(BaseModel):
    """Schema for sending a direct message."""

    to_user_id: str = Field(..., min_length=1, description="Recipient user id")
    text: str | None = Field(None, max_length=5000)
    media_url: str | None = Field(None, description="URL issued by the media service")
    message_type: MessageType = Field(MessageType.TEXT, description="text or image")


class MessageResponse(BaseModel):
    """Message payload returned by the API and pushed over live channels."""

    id: int
    from_user_id: str
    to_user_id: str
    text: str | None
    media_url: str | None
    message_type: MessageType
    seen: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
