# src/linkup/api/v1/endpoints/posts.py
"""Post-related endpoints for the Linkup API."""

from fastapi import APIRouter, Query, status

from linkup.schemas.post import LikeResponse, PostCreate, PostResponse
from linkup.services import content, visibility

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    """Create a post. Images are URLs already issued by the media service.

    Args:
        post_data: Post content, image URLs and type
        current_user: Authenticated author
        db: Database session

    Returns:
        The created post

    Raises:
        ValidationFailedError: If the payload does not fit the post type
    """
    post = content.create_post(
        db,
        current_user.user_id,
        post_type=post_data.post_type,
        content=post_data.content,
        image_urls=post_data.image_urls,
    )
    return content.to_post_responses(db, [post])[0]


@router.get("/feed", response_model=list[PostResponse])
async def get_feed(
    current_user: CurrentUserDep,
    db: SessionDep,
    limit: int | None = Query(None, ge=1, le=500, description="Maximum number of posts"),
) -> list[PostResponse]:
    """Posts by the caller, their connections and the users they follow, newest first."""
    posts = visibility.feed(db, current_user.user_id, limit=limit)
    return content.to_post_responses(db, posts)


@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(post_id: int, current_user: CurrentUserDep, db: SessionDep) -> LikeResponse:
    """Toggle the caller's like on a post."""
    liked = content.toggle_like(db, post_id, current_user.user_id)
    return LikeResponse(post_id=post_id, liked=liked)
