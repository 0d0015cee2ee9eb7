"""Story endpoints."""

from fastapi import APIRouter, status

from linkup.models import Story
from linkup.schemas.story import StoryCreate, StoryResponse
from linkup.services import content, visibility

from ..dependencies import CurrentUserDep, SessionDep, TriggerDep

router = APIRouter(prefix="/stories", tags=["stories"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=StoryResponse)
async def create_story(
    story_data: StoryCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
    trigger: TriggerDep,
) -> Story:
    """Publish a story that stays visible for the configured window."""
    return content.create_story(
        db,
        current_user.user_id,
        trigger,
        media_type=story_data.media_type,
        content=story_data.content,
        media_url=story_data.media_url,
        background_color=story_data.background_color,
    )


@router.get("/", response_model=list[StoryResponse])
async def list_stories(current_user: CurrentUserDep, db: SessionDep) -> list[Story]:
    """Unexpired stories visible to the caller, newest first."""
    return visibility.active_stories(db, current_user.user_id)
