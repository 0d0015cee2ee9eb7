# src/linkup/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from linkup.models.post import PostType


class PostCreate(BaseModel):
    """Schema for creating a post; images are URLs from the media service."""

    content: str | None = Field(None, max_length=5000, description="Text body")
    image_urls: list[str] = Field(default_factory=list, description="Ordered image URLs")
    post_type: PostType = Field(..., description="text, image or text_with_image")


class PostResponse(BaseModel):
    id: int
    author_id: str
    content: str | None
    image_urls: list[str]
    post_type: PostType
    liked_by: list[str] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeResponse(BaseModel):
    post_id: int
    liked: bool
