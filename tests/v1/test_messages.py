# mypy: ignore-errors
"""Tests for direct message endpoints and the live stream."""

import json

import pytest
from fastapi import status

from linkup.api.v1.endpoints.messages import stream_messages
from linkup.services import messaging
from linkup.services.realtime import CONNECTED_FRAME, KEEPALIVE_FRAME


def _send(client, headers, to_user_id, text):
    return client.post("/api/v1/messages/", json={"to_user_id": to_user_id, "text": text}, headers=headers)


def test_send_message_pushes_to_open_channel(client, hub, alice, bob, alice_headers) -> None:
    handle = hub.open_channel(bob.user_id)

    response = _send(client, alice_headers, bob.user_id, "hi bob")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["from_user_id"] == alice.user_id
    assert data["seen"] is False

    frame = handle.get_nowait()
    assert frame.startswith("data: ")
    assert json.loads(frame[len("data: "):])["id"] == data["id"]


def test_send_message_without_listener_still_persists(client, alice, bob, alice_headers, bob_headers) -> None:
    response = _send(client, alice_headers, bob.user_id, "are you there?")
    assert response.status_code == status.HTTP_201_CREATED

    thread = client.get(f"/api/v1/messages/thread/{alice.user_id}", headers=bob_headers).json()
    assert [m["text"] for m in thread] == ["are you there?"]


def test_send_message_to_unknown_user(client, alice, alice_headers) -> None:
    response = _send(client, alice_headers, "ghost", "boo")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_send_empty_text_message(client, alice, bob, alice_headers) -> None:
    response = _send(client, alice_headers, bob.user_id, "   ")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_thread_marks_received_messages_seen(client, alice, bob, alice_headers, bob_headers) -> None:
    _send(client, alice_headers, bob.user_id, "one")
    _send(client, bob_headers, alice.user_id, "two")

    thread = client.get(f"/api/v1/messages/thread/{alice.user_id}", headers=bob_headers).json()

    assert [m["text"] for m in thread] == ["two", "one"]
    seen = {m["text"]: m["seen"] for m in thread}
    assert seen == {"one": True, "two": False}


def test_recent_messages_latest_per_sender(
    client, alice, bob, carol, alice_headers, bob_headers, carol_headers
) -> None:
    _send(client, bob_headers, alice.user_id, "first from bob")
    _send(client, carol_headers, alice.user_id, "from carol")
    _send(client, bob_headers, alice.user_id, "second from bob")

    recent = client.get("/api/v1/messages/recent", headers=alice_headers).json()

    assert [m["text"] for m in recent] == ["second from bob", "from carol"]


def test_stream_of_another_user_is_forbidden(client, alice, bob, alice_headers, hub) -> None:
    response = client.get(f"/api/v1/messages/stream/{bob.user_id}", headers=alice_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert hub.current(bob.user_id) is None


def test_stream_requires_authentication(client, bob) -> None:
    response = client.get(f"/api/v1/messages/stream/{bob.user_id}")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_stream_yields_pushed_messages(hub, db_session, alice, bob) -> None:
    response = await stream_messages(user_id=alice.user_id, current_user=alice, hub=hub)

    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert hub.is_online(alice.user_id)

    message = messaging.send_message(db_session, hub, bob.user_id, alice.user_id, text="live")
    hub.stop()

    frames = [frame async for frame in response.body_iterator if frame != KEEPALIVE_FRAME]
    assert frames[0] == CONNECTED_FRAME
    assert json.loads(frames[1][len("data: "):])["id"] == message.id
    assert len(frames) == 2
