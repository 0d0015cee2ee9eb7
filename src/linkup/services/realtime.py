"""Realtime delivery of direct messages over server-sent event channels.

The hub keeps a process-local registry of which user currently holds an open
channel and pushes newly persisted messages into it. It owns no message
records: the database is the source of truth and a push is only a latency
optimization, so every failure mode on this path (no channel, full queue,
closed channel) silently drops the push and the recipient picks the message
up on its next thread query.

The registry is rebuilt from nothing on restart; clients reconnect.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import AsyncIterator
from threading import Lock

from linkup.core.settings import settings
from linkup.models import Message
from linkup.schemas.message import MessageResponse

logger = logging.getLogger(__name__)

CONNECTED_FRAME = ": connected\n\n"
KEEPALIVE_FRAME = ": keep-alive\n\n"

_handle_ids = itertools.count(1)


def format_frame(message: Message) -> str:
    """Render a message as a single ``data:`` frame."""
    payload = MessageResponse.model_validate(message).model_dump_json()
    return f"data: {payload}\n\n"


class ChannelHandle:
    """One open receive channel for a user.

    Frames wait in a bounded queue until the streaming response pulls them.
    ``None`` in the queue marks the channel closed.
    """

    def __init__(self, user_id: str, queue_size: int) -> None:
        self.user_id = user_id
        self.handle_id = next(_handle_ids)
        self.closed = False
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=queue_size)
        try:
            self._loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

    def __repr__(self) -> str:
        return f"ChannelHandle(user_id={self.user_id!r}, handle_id={self.handle_id})"

    @property
    def pending(self) -> int:
        """Number of frames waiting to be written."""
        return self._queue.qsize()

    def push(self, frame: str) -> None:
        """Queue ``frame`` without blocking; drops it if the channel can't take it."""
        if self.closed:
            return
        if self._needs_loop_hop():
            # asyncio.Queue is not thread-safe; hop onto the channel's loop. Callbacks
            # run in submission order, which keeps per-sender ordering.
            self._loop.call_soon_threadsafe(self._offer, frame)
            return
        self._offer(frame)

    def get_nowait(self) -> str | None:
        return self._queue.get_nowait()

    async def next_frame(self) -> str | None:
        """Wait for the next frame; ``None`` once the channel is closed."""
        return await self._queue.get()

    def close(self) -> None:
        """Mark the channel closed and wake the stream so it can finish."""
        if self.closed:
            return
        self.closed = True
        if self._needs_loop_hop():
            self._loop.call_soon_threadsafe(self._put_sentinel)
        else:
            self._put_sentinel()

    def _needs_loop_hop(self) -> bool:
        if self._loop is None or self._loop.is_closed():
            return False
        try:
            return asyncio.get_running_loop() is not self._loop
        except RuntimeError:
            return True

    def _offer(self, frame: str) -> None:
        if self.closed:
            return
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.debug("Dropping push for %s: channel queue is full", self.user_id)

    def _put_sentinel(self) -> None:
        # The close marker must get through even if the stream stalled.
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                self._queue.get_nowait()


class DeliveryHub:
    """Registry of open channels, at most one per user.

    Opening a channel replaces any previous one for the same user
    (last writer wins). The superseded handle is left open; it finishes
    when its own transport disconnects.
    """

    def __init__(
        self,
        queue_size: int | None = None,
        heartbeat_seconds: float | None = None,
    ) -> None:
        self.queue_size = queue_size or settings.channel_queue_size
        self.heartbeat_seconds = heartbeat_seconds or settings.channel_heartbeat_seconds
        self._channels: dict[str, ChannelHandle] = {}
        self._lock = Lock()
        self._running = False

    def start(self) -> None:
        """Begin accepting channels."""
        self._running = True
        logger.info("Delivery hub started")

    def stop(self) -> None:
        """Close every open channel and stop accepting new ones."""
        with self._lock:
            self._running = False
            handles = list(self._channels.values())
            self._channels.clear()
        for handle in handles:
            handle.close()
        logger.info("Delivery hub stopped, closed %d channel(s)", len(handles))

    def open_channel(self, user_id: str) -> ChannelHandle:
        """Register a fresh channel for ``user_id``."""
        handle = ChannelHandle(user_id, self.queue_size)
        with self._lock:
            if not self._running:
                handle.close()
                return handle
            previous = self._channels.get(user_id)
            self._channels[user_id] = handle
        if previous is not None:
            logger.debug("Channel %s superseded %s", handle, previous)
        logger.info("Opened channel %s", handle)
        return handle

    def close_channel(self, user_id: str, handle: ChannelHandle) -> bool:
        """Unregister ``handle`` if it is still the user's current channel.

        Returns:
            True if the mapping was removed.
        """
        with self._lock:
            removed = self._channels.get(user_id) is handle
            if removed:
                del self._channels[user_id]
        handle.close()
        if removed:
            logger.info("Closed channel %s", handle)
        return removed

    def current(self, user_id: str) -> ChannelHandle | None:
        """Return the registered handle for ``user_id``, if any."""
        with self._lock:
            return self._channels.get(user_id)

    def is_online(self, user_id: str) -> bool:
        return self.current(user_id) is not None

    def deliver(self, message: Message) -> bool:
        """Push ``message`` to its recipient's live channel, best-effort.

        Must be called after the message is committed and in commit order.

        Returns:
            True if a channel was found and the frame was handed to it.
        """
        handle = self.current(message.to_user_id)
        if handle is None:
            return False
        try:
            handle.push(format_frame(message))
        except RuntimeError as exc:
            # The channel's loop has shut down underneath us.
            logger.debug("Dropping push for %s: %s", message.to_user_id, exc)
            return False
        return True


async def channel_frames(hub: DeliveryHub, handle: ChannelHandle) -> AsyncIterator[str]:
    """Yield SSE frames for ``handle`` until it closes.

    A keep-alive comment goes out every ``hub.heartbeat_seconds`` on a fixed
    schedule, whether or not messages are flowing. The handle is
    unregistered on any exit, including client disconnects that cancel the
    generator.
    """
    loop = asyncio.get_running_loop()
    try:
        yield CONNECTED_FRAME
        next_beat = loop.time() + hub.heartbeat_seconds
        while True:
            remaining = next_beat - loop.time()
            if remaining <= 0:
                next_beat += hub.heartbeat_seconds
                if next_beat <= loop.time():
                    # Reader stalled for several intervals; send one beat, not a burst.
                    next_beat = loop.time() + hub.heartbeat_seconds
                yield KEEPALIVE_FRAME
                continue
            try:
                frame = await asyncio.wait_for(handle.next_frame(), timeout=remaining)
            except TimeoutError:
                continue
            if frame is None:
                break
            yield frame
    finally:
        hub.close_channel(handle.user_id, handle)
