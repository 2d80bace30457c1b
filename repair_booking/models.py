"""
Database models for the repair booking system
"""
import enum

from sqlalchemy import Column, Index, Integer, String, Text, text

from .database import Base


class BookingStatus(str, enum.Enum):
    BOOKED = "booked"
    CANCELED = "canceled"
    COMPLETED = "completed"


class Booking(Base):
    """One reservation of a slot on a date"""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Literal date string; only checked for being non-empty
    date = Column(String, nullable=False, index=True)
    slot = Column(Integer, nullable=False)
    name = Column(String(200))
    phone = Column(String(50))
    email = Column(String(200))
    address = Column(Text)
    notes = Column(Text)

    # booked -> canceled | completed, never back
    status = Column(String(20), nullable=False, default=BookingStatus.BOOKED.value)

    # Only one active booking per slot; canceled/completed rows free it
    __table_args__ = (
        Index(
            "unique_active_booking_slot",
            "date",
            "slot",
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
    )

    def __repr__(self):
        return f"<Booking #{self.id} {self.date} slot={self.slot} {self.status}>"
