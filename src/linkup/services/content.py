"""Service-level helpers for posts and stories."""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from linkup.core.errors import NotFoundError, ValidationFailedError
from linkup.core.settings import settings
from linkup.models import MediaType, Post, PostLike, PostType, Story
from linkup.schemas.post import PostResponse
from linkup.services import graph
from linkup.services.events import STORY_CREATED, EventTrigger


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())


def create_post(
    db: Session,
    author_id: str,
    *,
    post_type: PostType,
    content: str | None = None,
    image_urls: Sequence[str] = (),
) -> Post:
    """Persist a post after checking its payload matches ``post_type``.

    Raises:
        ValidationFailedError: If there are too many images, or the text/images
            present don't fit the declared type.
    """
    graph.require_user(db, author_id)
    images = list(image_urls)
    if len(images) > settings.max_post_images:
        raise ValidationFailedError(f"A post can have at most {settings.max_post_images} images")
    if post_type in (PostType.TEXT, PostType.TEXT_WITH_IMAGE) and not _has_text(content):
        raise ValidationFailedError(f"A {post_type.value} post needs content")
    if post_type in (PostType.IMAGE, PostType.TEXT_WITH_IMAGE) and not images:
        raise ValidationFailedError(f"A {post_type.value} post needs at least one image")
    if post_type is PostType.TEXT and images:
        raise ValidationFailedError("A text post cannot carry images")

    post = Post(author_id=author_id, content=content, image_urls=images, post_type=post_type)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def posts_by(db: Session, author_id: str, limit: int | None = None) -> list[Post]:
    stmt = (
        select(Post)
        .where(Post.author_id == author_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt))


def likes_for(db: Session, post_ids: Iterable[int]) -> dict[int, list[str]]:
    """Map each post id to the ids of users who liked it."""
    ids = list(post_ids)
    likes: dict[int, list[str]] = defaultdict(list)
    if not ids:
        return likes
    rows = db.execute(
        select(PostLike.post_id, PostLike.user_id)
        .where(PostLike.post_id.in_(ids))
        .order_by(PostLike.user_id)
    )
    for post_id, user_id in rows:
        likes[post_id].append(user_id)
    return likes


def toggle_like(db: Session, post_id: int, user_id: str) -> bool:
    """Flip ``user_id``'s membership in the post's likes.

    Returns:
        True if the post is now liked by the user.
    """
    if db.get(Post, post_id) is None:
        raise NotFoundError("Post not found")

    if db.get(PostLike, (post_id, user_id)) is not None:
        db.execute(delete(PostLike).where(PostLike.post_id == post_id, PostLike.user_id == user_id))
        db.commit()
        return False

    db.add(PostLike(post_id=post_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
    return True


def to_post_responses(db: Session, posts: Sequence[Post]) -> list[PostResponse]:
    """Convert Post ORM instances to API schemas with their likes attached."""
    likes = likes_for(db, (post.id for post in posts))
    return [
        PostResponse.model_construct(
            id=post.id,
            author_id=post.author_id,
            content=post.content,
            image_urls=list(post.image_urls or []),
            post_type=post.post_type,
            liked_by=likes.get(post.id, []),
            created_at=post.created_at,
        )
        for post in posts
    ]


def create_story(
    db: Session,
    author_id: str,
    trigger: EventTrigger,
    *,
    media_type: MediaType,
    content: str | None = None,
    media_url: str | None = None,
    background_color: str | None = None,
) -> Story:
    """Persist a story and announce it so the job runner can expire it."""
    graph.require_user(db, author_id)
    if media_type is MediaType.TEXT and not _has_text(content):
        raise ValidationFailedError("A text story needs content")
    if media_type in (MediaType.IMAGE, MediaType.VIDEO) and not media_url:
        raise ValidationFailedError("Image and video stories need a media URL")

    story = Story(
        author_id=author_id,
        content=content,
        media_url=media_url,
        media_type=media_type,
        background_color=background_color,
    )
    db.add(story)
    db.commit()
    db.refresh(story)

    trigger.emit(
        STORY_CREATED,
        user_ids=(author_id,),
        entity_id=story.id,
        timestamp=story.created_at,
    )
    return story
