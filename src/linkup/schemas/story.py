"""Story-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from linkup.models.story import MediaType

_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class StoryCreate(BaseModel):
    """Schema for creating a story."""

    content: str | None = Field(None, max_length=1000)
    media_url: str | None = Field(None, description="URL issued by the media service")
    media_type: MediaType = Field(..., description="text, image or video")
    background_color: str | None = Field(None, description="Hex color, e.g. #4f46e5")

    @field_validator("background_color")
    @classmethod
    def validate_background_color(cls, v: str | None) -> str | None:
        """Validate background color is a valid hex color code."""
        if v is None:
            return v
        if not _COLOR_PATTERN.match(v):
            raise ValueError("Background color must be a valid hex color code (e.g., #4F46E5)")
        return v


class StoryResponse(BaseModel):
    id: int
    author_id: str
    content: str | None
    media_url: str | None
    media_type: MediaType
    background_color: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
