"""
Concurrency tests for registration admission.

Every worker uses its own session, the way each request gets its own
session from get_db, and all of them contend for the same event lock.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import Session

from app.database.db import SessionLocal
from app.services.errors import AlreadyRegisteredError, EventFullError
from app.services.registrations import count_registrations, register_for_event
from app.tests.factories import make_event, make_users


def attempt_registration(event_id: int, user_id: int) -> str:
    db = SessionLocal()
    try:
        register_for_event(db, event_id=event_id, user_id=user_id)
        return "admitted"
    except EventFullError:
        return "full"
    except AlreadyRegisteredError:
        return "duplicate"
    finally:
        db.close()


@pytest.mark.parametrize("capacity,extra", [(1, 9), (3, 7), (5, 10)])
def test_exactly_capacity_admitted(db_session: Session, redis_client, capacity: int, extra: int):
    event = make_event(db_session, title="Race Event", capacity=capacity)
    user_ids = make_users(db_session, capacity + extra)

    with ThreadPoolExecutor(max_workers=len(user_ids)) as executor:
        futures = [executor.submit(attempt_registration, event.id, user_id) for user_id in user_ids]
        results = [f.result() for f in futures]

    assert results.count("admitted") == capacity
    assert results.count("full") == extra
    assert count_registrations(db_session, event.id) == capacity


def test_same_user_concurrently_registers_once(db_session: Session, redis_client):
    event = make_event(db_session, capacity=10)
    [user_id] = make_users(db_session, 1)

    with ThreadPoolExecutor(max_workers=8) as executor:
        futures = [executor.submit(attempt_registration, event.id, user_id) for _ in range(8)]
        results = [f.result() for f in futures]

    assert results.count("admitted") == 1
    assert results.count("duplicate") == 7
    assert count_registrations(db_session, event.id) == 1


def test_events_are_filled_independently(db_session: Session, redis_client):
    first = make_event(db_session, title="First", capacity=2)
    second = make_event(db_session, title="Second", capacity=3)
    user_ids = make_users(db_session, 6)

    with ThreadPoolExecutor(max_workers=12) as executor:
        futures = [
            executor.submit(attempt_registration, event.id, user_id)
            for event in (first, second)
            for user_id in user_ids
        ]
        results = [f.result() for f in futures]

    assert results.count("admitted") == 5
    assert results.count("full") == 7
    assert count_registrations(db_session, first.id) == 2
    assert count_registrations(db_session, second.id) == 3
