from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.config import MAX_CAPACITY, MIN_CAPACITY
from app.database.db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    registrations: Mapped[list["Registration"]] = relationship(back_populates="event")

    __table_args__ = (
        CheckConstraint(
            f"capacity >= {MIN_CAPACITY} AND capacity <= {MAX_CAPACITY}",
            name="check_capacity_range",
        ),
        # Upcoming listing is ordered by date, then location
        Index("ix_events_date_location", "event_date", "location"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, capacity={self.capacity})>"
