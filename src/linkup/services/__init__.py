# src/linkup/services/__init__.py
"""Business logic services for the Linkup application."""

from .events import EventTrigger, InMemoryEventTrigger, RedisEventTrigger
from .realtime import ChannelHandle, DeliveryHub

__all__ = [
    "ChannelHandle",
    "DeliveryHub",
    "EventTrigger",
    "InMemoryEventTrigger",
    "RedisEventTrigger",
]
