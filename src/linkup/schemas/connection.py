"""Connection workflow Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from linkup.models.connection_request import ConnectionStatus


class ConnectionRequestResponse(BaseModel):
    id: int
    from_user_id: str
    to_user_id: str
    status: ConnectionStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConnectionsOverview(BaseModel):
    """Graph summary returned by ``GET /connections``."""

    connections: list[str]
    followers: list[str]
    following: list[str]
    pending_incoming: list[ConnectionRequestResponse]
