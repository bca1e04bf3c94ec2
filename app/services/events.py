import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import MAX_CAPACITY, MIN_CAPACITY
from app.database.db import transaction
from app.models.events import Event
from app.models.registrations import Registration
from app.models.users import User
from app.services.errors import (
    EventExpiredError,
    EventNotFoundError,
    InvalidCapacityError,
    InvalidInputError,
    PastDateError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_event_fields(
    *,
    title: str | None,
    event_date: datetime | None,
    location: str | None,
    capacity: int | None,
    now: datetime | None = None,
) -> datetime:
    """Check creation parameters and return the event date normalized to UTC."""
    missing = (
        not (title and title.strip())
        or event_date is None
        or not (location and location.strip())
        or capacity is None
    )
    if missing:
        raise InvalidInputError()
    if not MIN_CAPACITY <= capacity <= MAX_CAPACITY:
        raise InvalidCapacityError(f"Capacity must be between {MIN_CAPACITY} and {MAX_CAPACITY}")

    event_date = as_utc(event_date)
    # Strictly future: an event dated exactly now is already past, as in the listing
    if event_date <= as_utc(now or utcnow()):
        raise PastDateError()
    return event_date


def create_event(
    db: Session,
    *,
    title: str | None,
    event_date: datetime | None,
    location: str | None,
    capacity: int | None,
    now: datetime | None = None,
) -> int:
    """Validate and persist a new event. Returns the new event id."""
    event_date = validate_event_fields(
        title=title, event_date=event_date, location=location, capacity=capacity, now=now
    )
    event = Event(title=title, event_date=event_date, location=location, capacity=capacity)
    try:
        with transaction(db):
            db.add(event)
            db.flush()
            event_id = event.id
    except SQLAlchemyError as e:
        logger.exception("Failed to create event %r", title)
        raise StorageFailureError(str(e)) from e

    logger.info("Created event %s (capacity=%s, date=%s)", event_id, capacity, event_date.isoformat())
    return event_id


def validate_for_registration(event: Event, *, now: datetime | None = None) -> None:
    """Reject registration for an event whose date is not in the future."""
    # Registration is open only while the event is listed as upcoming (date > now)
    if as_utc(event.event_date) <= as_utc(now or utcnow()):
        raise EventExpiredError()


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError()
    return event


def list_upcoming_events(db: Session, *, now: datetime | None = None) -> list[Event]:
    """Events dated after now, ordered by date and then location."""
    stmt = (
        select(Event)
        .where(Event.event_date > as_utc(now or utcnow()))
        .order_by(Event.event_date.asc(), Event.location.asc())
    )
    return list(db.scalars(stmt))


def get_event_details(db: Session, event_id: int) -> dict:
    event = get_event(db, event_id)

    rows = db.execute(
        select(User.id, User.name, User.email)
        .join(Registration, Registration.user_id == User.id)
        .where(Registration.event_id == event_id)
        .order_by(Registration.id)
    ).all()

    return {
        "id": event.id,
        "title": event.title,
        "event_date": as_utc(event.event_date),
        "location": event.location,
        "capacity": event.capacity,
        "registered_users": [{"id": r.id, "name": r.name, "email": r.email} for r in rows],
    }
