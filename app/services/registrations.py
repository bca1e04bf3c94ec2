import logging
from datetime import datetime

import redis
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import EVENT_LOCK_BLOCKING_TIMEOUT, EVENT_LOCK_TIMEOUT, get_redis_url
from app.database.db import transaction
from app.models.events import Event
from app.models.registrations import Registration
from app.services.errors import (
    AlreadyRegisteredError,
    EventFullError,
    EventNotFoundError,
    LockUnavailableError,
    NotRegisteredError,
    StorageFailureError,
)
from app.services.events import get_event, validate_for_registration

logger = logging.getLogger(__name__)


def get_redis_client():
    """Get Redis client for locking."""
    return redis.from_url(get_redis_url(), decode_responses=True)


def event_lock_key(event_id: int) -> str:
    return f"event_lock:{event_id}"


def register_for_event(
    db: Session, *, event_id: int, user_id: int, now: datetime | None = None
) -> Registration:
    """
    Register a user for an event under a per-event Redis lock.

    The occupancy check and the insert run in one transaction that commits
    before the lock is released, so two requests can never both take the
    last seat. Requests for different events use different locks.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        event_lock_key(event_id),
        timeout=EVENT_LOCK_TIMEOUT,
        blocking_timeout=EVENT_LOCK_BLOCKING_TIMEOUT,
    )

    try:
        acquired = lock.acquire(blocking=True)
    except redis.exceptions.RedisError as e:
        logger.error("Lock backend error for event %s: %s", event_id, e)
        raise StorageFailureError(f"Lock backend unavailable: {e}") from e
    if not acquired:
        logger.warning("Timed out waiting for lock on event %s (user %s)", event_id, user_id)
        raise LockUnavailableError()

    try:
        registration = _admit(db, event_id=event_id, user_id=user_id, now=now)
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Held past its timeout; the transaction had already finished.
            logger.warning("Lock on event %s expired before release", event_id)
        except redis.exceptions.RedisError as e:
            # The transaction outcome is already final; the lock expires on its own.
            logger.warning("Could not release lock on event %s: %s", event_id, e)

    logger.info("Registered user %s for event %s", user_id, event_id)
    return registration


def _admit(db: Session, *, event_id: int, user_id: int, now: datetime | None) -> Registration:
    try:
        with transaction(db):
            return _register_in_transaction(db, event_id, user_id, now)
    except IntegrityError as e:
        # The unique (user, event) constraint is the only expected violation
        if is_registered(db, event_id=event_id, user_id=user_id):
            logger.info("Duplicate registration for user %s on event %s", user_id, event_id)
            raise AlreadyRegisteredError() from e
        logger.error("Integrity error registering user %s for event %s: %s", user_id, event_id, e.orig)
        raise StorageFailureError(str(e.orig)) from e
    except SQLAlchemyError as e:
        logger.exception("Storage failure registering user %s for event %s", user_id, event_id)
        raise StorageFailureError(str(e)) from e


def _register_in_transaction(
    db: Session, event_id: int, user_id: int, now: datetime | None
) -> Registration:
    """Internal function to admit a registration within a transaction."""
    # Row lock on the event where the backend supports it
    event = db.scalars(select(Event).where(Event.id == event_id).with_for_update()).one_or_none()
    if event is None:
        raise EventNotFoundError()

    validate_for_registration(event, now=now)

    if is_registered(db, event_id=event_id, user_id=user_id):
        raise AlreadyRegisteredError()

    total = count_registrations(db, event_id)
    if total >= event.capacity:
        logger.info("Event %s is full (%s/%s), rejecting user %s", event_id, total, event.capacity, user_id)
        raise EventFullError()

    registration = Registration(user_id=user_id, event_id=event_id)
    db.add(registration)
    db.flush()  # gets registration.id, surfaces constraint violations
    db.refresh(registration)
    return registration


def cancel_registration(db: Session, *, event_id: int, user_id: int) -> None:
    """Remove a registration. Raises NotRegisteredError when there is none."""
    stmt = delete(Registration).where(
        Registration.user_id == user_id,
        Registration.event_id == event_id,
    )
    try:
        with transaction(db):
            res = db.execute(stmt)
            if res.rowcount == 0:  # type: ignore
                raise NotRegisteredError()
    except SQLAlchemyError as e:
        logger.exception("Storage failure cancelling user %s on event %s", user_id, event_id)
        raise StorageFailureError(str(e)) from e

    logger.info("Cancelled registration of user %s for event %s", user_id, event_id)


def is_registered(db: Session, *, event_id: int, user_id: int) -> bool:
    found = db.scalar(
        select(Registration.id).where(
            Registration.user_id == user_id,
            Registration.event_id == event_id,
        )
    )
    return found is not None


def count_registrations(db: Session, event_id: int) -> int:
    total = db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id))
    return int(total or 0)


def get_event_stats(db: Session, event_id: int) -> dict:
    """Occupancy of an event, read without locking."""
    event = get_event(db, event_id)
    total = count_registrations(db, event_id)
    percentage_used = total / event.capacity * 100

    return {
        "total_registrations": total,
        "remaining_capacity": event.capacity - total,
        "percentage_used": f"{percentage_used:.2f}%",
    }
