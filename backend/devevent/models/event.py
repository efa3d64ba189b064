"""
Event model, owned by the event catalog.

Key design decisions:
- `capacity` is nullable: NULL means unlimited spots
- No denormalized available-seats counter. Booked counts are aggregated live
  from confirmed bookings, so there is no second number to drift
- Index on `date` for range queries (upcoming events)
"""

from sqlalchemy import Column, Integer, String, DateTime, Index, CheckConstraint
from sqlalchemy.orm import relationship

from devevent.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    description = Column(String(1000), nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=True)
    capacity = Column(Integer, nullable=True)

    bookings = relationship("Booking", back_populates="event", lazy="noload")

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity > 0", name="check_event_capacity_positive"),
        Index("ix_events_date", "date"),
    )

    @property
    def is_unlimited(self) -> bool:
        return self.capacity is None

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, capacity={self.capacity})>"
