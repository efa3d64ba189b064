"""
Booking model: one attendee's reservation for one event.

Key design decisions:
- Partial unique index on (event_id, attendee_email) WHERE status = 'confirmed'
  allows one live booking per attendee while keeping cancelled rows around
- ticket_code is unique across all rows, cancelled ones included, so a code
  is never handed out twice
- Status field allows cancellation without deleting records
"""

import enum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from devevent.db.base import Base, TimestampMixin

TICKET_CODE_CONSTRAINT = "uq_bookings_ticket_code"
CONFIRMED_ATTENDEE_INDEX = "uq_bookings_event_attendee_confirmed"


def normalize_email(email: str) -> str:
    """Attendee identity key: emails compare case-insensitively."""
    return email.strip().lower()


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    attendee_email = Column(String(255), nullable=False, index=True)
    attendee_name = Column(String(255), nullable=False)
    ticket_code = Column(String(32), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    # "metadata" is reserved on declarative classes
    attendee_metadata = Column(
        "metadata",
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("Event", back_populates="bookings", lazy="joined", innerjoin=True)

    __table_args__ = (
        UniqueConstraint("ticket_code", name=TICKET_CODE_CONSTRAINT),
        Index(
            CONFIRMED_ATTENDEE_INDEX,
            "event_id",
            "attendee_email",
            unique=True,
            postgresql_where=text("status = 'confirmed'"),
            sqlite_where=text("status = 'confirmed'"),
        ),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_booking_status"),
    )

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED.value

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, ticket={self.ticket_code}, status={self.status})>"
