"""Tests for the realtime delivery hub."""

import asyncio
import json
import threading

import pytest

from linkup.db.time import utcnow
from linkup.models import Message, MessageType
from linkup.services.realtime import (
    CONNECTED_FRAME,
    KEEPALIVE_FRAME,
    ChannelHandle,
    DeliveryHub,
    channel_frames,
    format_frame,
)


def _message(message_id: int, to_user_id: str = "alice", text: str = "hi") -> Message:
    return Message(
        id=message_id,
        from_user_id="bob",
        to_user_id=to_user_id,
        text=text,
        media_url=None,
        message_type=MessageType.TEXT,
        seen=False,
        created_at=utcnow(),
    )


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: "):-2])


async def _next_data(stream) -> str:
    """Next frame from ``stream`` that is not a keep-alive."""
    frame = await stream.__anext__()
    while frame == KEEPALIVE_FRAME:
        frame = await stream.__anext__()
    return frame


def test_format_frame_is_a_single_data_frame() -> None:
    frame = format_frame(_message(7))

    payload = _decode(frame)
    assert payload["id"] == 7
    assert payload["text"] == "hi"
    assert payload["seen"] is False
    assert frame.count("\n\n") == 1


def test_deliver_pushes_to_open_channel(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")

    assert hub.deliver(_message(1)) is True

    assert _decode(handle.get_nowait())["id"] == 1


def test_deliver_without_channel_does_nothing(hub: DeliveryHub) -> None:
    other = hub.open_channel("carol")

    assert hub.deliver(_message(1)) is False
    assert other.pending == 0


def test_reopening_supersedes_previous_channel(hub: DeliveryHub) -> None:
    first = hub.open_channel("alice")
    second = hub.open_channel("alice")

    hub.deliver(_message(1))

    assert first.pending == 0
    assert second.pending == 1
    # The superseded handle is not closed by the reopen.
    assert first.closed is False


def test_stale_close_does_not_evict_newer_channel(hub: DeliveryHub) -> None:
    first = hub.open_channel("alice")
    second = hub.open_channel("alice")

    assert hub.close_channel("alice", first) is False
    assert hub.current("alice") is second

    assert hub.close_channel("alice", second) is True
    assert hub.current("alice") is None


def test_messages_keep_persisted_order(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")

    for message_id in range(1, 6):
        hub.deliver(_message(message_id))

    ids = [_decode(handle.get_nowait())["id"] for _ in range(5)]
    assert ids == [1, 2, 3, 4, 5]


def test_full_queue_drops_pushes_without_raising(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")

    for message_id in range(hub.queue_size + 3):
        assert hub.deliver(_message(message_id)) is True

    assert handle.pending == hub.queue_size


def test_closed_channel_receives_nothing(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")
    hub.close_channel("alice", handle)

    assert hub.deliver(_message(1)) is False
    assert handle.get_nowait() is None
    assert handle.pending == 0


def test_stop_closes_all_channels() -> None:
    hub = DeliveryHub(queue_size=4, heartbeat_seconds=1)
    hub.start()
    alice = hub.open_channel("alice")
    bob = hub.open_channel("bob")

    hub.stop()

    assert alice.closed and bob.closed
    assert hub.current("alice") is None
    # A stopped hub hands out already-closed handles.
    assert hub.open_channel("alice").closed is True
    assert hub.current("alice") is None


def test_concurrent_open_and_deliver_never_corrupts_registry(hub: DeliveryHub) -> None:
    handles: list[ChannelHandle] = []
    errors: list[BaseException] = []

    def opener() -> None:
        try:
            for _ in range(200):
                handles.append(hub.open_channel("alice"))
        except BaseException as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    def deliverer() -> None:
        try:
            for message_id in range(200):
                hub.deliver(_message(message_id))
        except BaseException as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=opener), threading.Thread(target=deliverer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert hub.current("alice") is handles[-1]


@pytest.mark.asyncio
async def test_channel_frames_streams_then_unregisters(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")
    stream = channel_frames(hub, handle)

    assert await stream.__anext__() == CONNECTED_FRAME
    hub.deliver(_message(42))
    assert _decode(await _next_data(stream))["id"] == 42

    hub.close_channel("alice", handle)
    with pytest.raises(StopAsyncIteration):
        await _next_data(stream)
    assert hub.current("alice") is None


@pytest.mark.asyncio
async def test_channel_frames_emits_heartbeat_when_idle(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")
    stream = channel_frames(hub, handle)

    await stream.__anext__()
    frame = await asyncio.wait_for(stream.__anext__(), timeout=1)

    assert frame == KEEPALIVE_FRAME
    assert hub.current("alice") is handle
    await stream.aclose()
    assert hub.current("alice") is None


@pytest.mark.asyncio
async def test_cross_thread_delivery_reaches_loop_owned_channel(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")

    worker = threading.Thread(target=lambda: hub.deliver(_message(9)))
    worker.start()
    worker.join()

    frame = await asyncio.wait_for(handle.next_frame(), timeout=1)
    assert _decode(frame)["id"] == 9


@pytest.mark.asyncio
async def test_heartbeat_keeps_schedule_while_messages_flow(hub: DeliveryHub) -> None:
    handle = hub.open_channel("alice")
    stream = channel_frames(hub, handle)
    await stream.__anext__()

    hub.deliver(_message(1))
    assert _decode(await stream.__anext__())["id"] == 1

    # A frame is already waiting, but the beat is due first.
    hub.deliver(_message(2))
    await asyncio.sleep(hub.heartbeat_seconds * 2)
    assert await stream.__anext__() == KEEPALIVE_FRAME
    assert _decode(await stream.__anext__())["id"] == 2

    await stream.aclose()
