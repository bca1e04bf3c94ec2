"""Helpers for building test data directly in the database."""
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.models.events import Event
from app.models.users import User


def future(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def make_event(
    db: Session,
    *,
    title: str = "Test Event",
    capacity: int = 10,
    event_date: datetime | None = None,
    location: str = "Main Hall",
) -> Event:
    """Insert an event directly, bypassing creation-time validation."""
    event = Event(
        title=title,
        capacity=capacity,
        event_date=event_date or future(),
        location=location,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def make_users(db: Session, count: int, *, prefix: str = "user") -> list[int]:
    users = [User(name=f"{prefix} {i}", email=f"{prefix}{i}@example.com") for i in range(1, count + 1)]
    db.add_all(users)
    db.commit()
    return [u.id for u in users]
