"""Lifecycle events handed to the external job runner.

The core never performs the side effects itself (reminder emails, story
deletion); it only publishes a named event with the ids involved. The Redis
trigger appends JSON envelopes to a list the job runner consumes; the
in-memory trigger keeps them for inspection in tests and local runs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Final

import redis

from linkup.core.settings import settings

logger = logging.getLogger(__name__)

CONNECTION_REQUESTED: Final[str] = "ConnectionRequested"
STORY_CREATED: Final[str] = "StoryCreated"


@dataclass(frozen=True)
class LifecycleEvent:
    """Event envelope published for the job runner."""

    name: str
    user_ids: tuple[str, ...]
    entity_id: int
    timestamp: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "event": self.name,
            "user_ids": list(self.user_ids),
            "entity_id": self.entity_id,
            "timestamp": self.timestamp.isoformat(),
        }


class EventTrigger:
    """Base publisher; subclasses implement :meth:`publish`."""

    def emit(
        self,
        name: str,
        *,
        user_ids: Iterable[str],
        entity_id: int,
        timestamp: datetime,
    ) -> LifecycleEvent:
        """Publish an event. Publishing failures are logged, never raised."""
        event = LifecycleEvent(
            name=name,
            user_ids=tuple(user_ids),
            entity_id=entity_id,
            timestamp=timestamp,
        )
        self.publish(event)
        return event

    def publish(self, event: LifecycleEvent) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources."""


@dataclass
class InMemoryEventTrigger(EventTrigger):
    """Collects events in process."""

    events: list[LifecycleEvent] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def publish(self, event: LifecycleEvent) -> None:
        with self._lock:
            self.events.append(event)
        logger.debug("Recorded %s event for entity %s", event.name, event.entity_id)

    def named(self, name: str) -> list[LifecycleEvent]:
        """Return recorded events with the given name, oldest first."""
        with self._lock:
            return [event for event in self.events if event.name == name]


class RedisEventTrigger(EventTrigger):
    """Appends events to a Redis list consumed by the job runner."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        queue_key: str | None = None,
    ) -> None:
        self._client = client or redis.Redis.from_url(settings.redis_url)
        self.queue_key = queue_key or settings.event_queue_key

    def publish(self, event: LifecycleEvent) -> None:
        try:
            self._client.rpush(self.queue_key, json.dumps(event.to_payload()))
        except redis.RedisError as exc:
            logger.warning(
                "Failed to publish %s event for entity %s: %s",
                event.name,
                event.entity_id,
                exc,
            )

    def close(self) -> None:
        self._client.close()


def build_event_trigger() -> EventTrigger:
    """Return the trigger selected by ``EVENT_BACKEND``."""
    if settings.event_backend == "redis":
        return RedisEventTrigger()
    return InMemoryEventTrigger()
