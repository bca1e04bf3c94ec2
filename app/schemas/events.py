from datetime import datetime

from pydantic import BaseModel, Field


# ---------- Event ----------
class EventCreate(BaseModel):
    # Presence and ranges are checked by the event service so that missing
    # fields are reported the same way as out-of-range ones.
    title: str | None = Field(default=None, max_length=200)
    event_date: datetime | None = None
    location: str | None = Field(default=None, max_length=200)
    capacity: int | None = None


class EventCreatedOut(BaseModel):
    event_id: int


class EventOut(BaseModel):
    id: int
    title: str
    event_date: datetime
    location: str
    capacity: int

    class Config:
        from_attributes = True


class RegisteredUserOut(BaseModel):
    id: int
    name: str
    email: str


class EventDetailsOut(EventOut):
    registered_users: list[RegisteredUserOut]


class EventStatsOut(BaseModel):
    total_registrations: int
    remaining_capacity: int
    percentage_used: str
