"""Tests for the connection request workflow."""

from datetime import timedelta

import pytest

from linkup.core.errors import InvalidTargetError, NotFoundError, RateLimitedError
from linkup.core.settings import settings
from linkup.db.time import utcnow
from linkup.models import ConnectionRequest, ConnectionStatus
from linkup.services import connections, graph
from linkup.services.events import CONNECTION_REQUESTED


def test_request_creates_pending_row_and_emits_event(db_session, trigger, alice, bob) -> None:
    request = connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)

    assert request.status == ConnectionStatus.PENDING
    assert request.from_user_id == alice.user_id
    assert request.to_user_id == bob.user_id

    events = trigger.named(CONNECTION_REQUESTED)
    assert len(events) == 1
    assert events[0].user_ids == (alice.user_id, bob.user_id)
    assert events[0].entity_id == request.id


def test_request_to_self_is_rejected(db_session, trigger, alice) -> None:
    with pytest.raises(InvalidTargetError):
        connections.request_connection(db_session, alice.user_id, alice.user_id, trigger)
    assert trigger.events == []


def test_request_to_unknown_user(db_session, trigger, alice) -> None:
    with pytest.raises(NotFoundError):
        connections.request_connection(db_session, alice.user_id, "ghost", trigger)


def test_repeated_requests_create_repeated_rows(db_session, trigger, alice, bob) -> None:
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)

    rows = db_session.query(ConnectionRequest).filter_by(from_user_id=alice.user_id).all()
    assert len(rows) == 2


def test_twenty_first_request_in_window_is_throttled(db_session, trigger, alice, bob) -> None:
    now = utcnow()
    limit = settings.connection_request_limit
    for i in range(limit):
        connections.request_connection(
            db_session, alice.user_id, bob.user_id, trigger, now=now + timedelta(seconds=i)
        )

    with pytest.raises(RateLimitedError):
        connections.request_connection(
            db_session, alice.user_id, bob.user_id, trigger, now=now + timedelta(seconds=limit)
        )
    assert len(trigger.named(CONNECTION_REQUESTED)) == limit


def test_throttle_window_slides(db_session, trigger, alice, bob) -> None:
    now = utcnow()
    window = timedelta(hours=settings.connection_request_window_hours)
    start = now - window
    for i in range(settings.connection_request_limit):
        connections.request_connection(
            db_session, alice.user_id, bob.user_id, trigger, now=start + timedelta(minutes=i)
        )

    # The first request has just aged out of the window.
    later = start + window + timedelta(seconds=30)
    request = connections.request_connection(db_session, alice.user_id, bob.user_id, trigger, now=later)
    assert request.status == ConnectionStatus.PENDING

    with pytest.raises(RateLimitedError):
        connections.request_connection(
            db_session, alice.user_id, bob.user_id, trigger, now=later + timedelta(seconds=1)
        )


def test_throttle_counts_accepted_requests(db_session, trigger, make_user, alice) -> None:
    now = utcnow()
    targets = [make_user() for _ in range(settings.connection_request_limit)]
    for offset, target in enumerate(targets):
        connections.request_connection(
            db_session, alice.user_id, target.user_id, trigger, now=now + timedelta(seconds=offset)
        )
        connections.accept_connection(db_session, target.user_id, alice.user_id)

    with pytest.raises(RateLimitedError):
        connections.request_connection(
            db_session, alice.user_id, targets[0].user_id, trigger, now=now + timedelta(minutes=1)
        )


def test_accept_connects_both_users(db_session, trigger, alice, bob) -> None:
    request = connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)

    accepted = connections.accept_connection(db_session, bob.user_id, alice.user_id)

    assert [r.id for r in accepted] == [request.id]
    db_session.refresh(request)
    assert request.status == ConnectionStatus.ACCEPTED
    assert graph.connections_of(db_session, alice.user_id) == {bob.user_id}
    assert graph.connections_of(db_session, bob.user_id) == {alice.user_id}


def test_accepted_request_never_transitions_again(db_session, trigger, alice, bob) -> None:
    request = connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)
    connections.accept_connection(db_session, bob.user_id, alice.user_id)
    db_session.refresh(request)
    accepted_at = request.updated_at

    with pytest.raises(NotFoundError):
        connections.accept_connection(db_session, bob.user_id, alice.user_id)

    db_session.refresh(request)
    assert request.status == ConnectionStatus.ACCEPTED
    assert request.updated_at == accepted_at


def test_only_the_addressee_can_accept(db_session, trigger, alice, bob) -> None:
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)

    with pytest.raises(NotFoundError):
        connections.accept_connection(db_session, alice.user_id, bob.user_id)
    assert graph.connections_of(db_session, alice.user_id) == set()


def test_accept_flips_duplicate_pending_rows(db_session, trigger, alice, bob) -> None:
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)

    accepted = connections.accept_connection(db_session, bob.user_id, alice.user_id)

    assert len(accepted) == 2
    assert all(r.status == ConnectionStatus.ACCEPTED for r in accepted)
    assert connections.pending_incoming(db_session, bob.user_id) == []


def test_list_connections(db_session, trigger, alice, bob, carol) -> None:
    connections.request_connection(db_session, alice.user_id, bob.user_id, trigger)
    connections.accept_connection(db_session, bob.user_id, alice.user_id)
    pending = connections.request_connection(db_session, carol.user_id, bob.user_id, trigger)
    graph.follow(db_session, carol.user_id, bob.user_id)
    graph.follow(db_session, bob.user_id, alice.user_id)

    summary = connections.list_connections(db_session, bob.user_id)

    assert summary.connections == {alice.user_id}
    assert summary.followers == {carol.user_id}
    assert summary.following == {alice.user_id}
    assert [r.id for r in summary.pending_incoming] == [pending.id]


def test_request_exactly_window_old_still_counts(db_session, trigger, alice, bob) -> None:
    start = utcnow() - timedelta(days=2)
    for _ in range(settings.connection_request_limit):
        connections.request_connection(db_session, alice.user_id, bob.user_id, trigger, now=start)

    window_end = start + timedelta(hours=settings.connection_request_window_hours)
    with pytest.raises(RateLimitedError):
        connections.request_connection(db_session, alice.user_id, bob.user_id, trigger, now=window_end)

    request = connections.request_connection(
        db_session, alice.user_id, bob.user_id, trigger, now=window_end + timedelta(seconds=1)
    )
    assert request.status == ConnectionStatus.PENDING
