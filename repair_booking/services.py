"""
Booking rules: slot availability, allocation and status transitions
"""
import datetime
import logging
from contextlib import contextmanager
from typing import Callable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import schemas
from .exceptions import InvalidInput, InvalidTransition, NotFound, SlotConflict, StoreUnavailable
from .models import Booking, BookingStatus
from .slots import DEFAULT_CATALOG, SlotCatalog

logger = logging.getLogger(__name__)


def _required_date(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise InvalidInput("Missing required field: date")
    return str(value).strip()


class BookingService:
    """Booking operations over one database session.

    Notifications are never sent from here directly: each one is handed to
    ``dispatch`` (FastAPI's ``BackgroundTasks.add_task`` in the web app), so
    the caller gets its result without waiting for email delivery.
    """

    def __init__(
        self,
        db: Session,
        catalog: SlotCatalog = DEFAULT_CATALOG,
        notifier=None,
        dispatch: Optional[Callable] = None,
    ):
        self.db = db
        self.catalog = catalog
        self.notifier = notifier
        self.dispatch = dispatch

    @contextmanager
    def _store(self):
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error: {e}")
            raise StoreUnavailable() from e

    @property
    def _notifications_on(self) -> bool:
        return self.notifier is not None and self.dispatch is not None

    def _record(self, booking: Booking) -> schemas.BookingResponse:
        return schemas.BookingResponse.from_booking(booking, self.catalog)

    def check_availability(self, date: Optional[str]) -> List[schemas.SlotAvailability]:
        """One entry per catalog slot, in catalog order"""
        date = _required_date(date)

        with self._store():
            rows = self.db.query(Booking.slot).filter(
                Booking.date == date,
                Booking.status == BookingStatus.BOOKED.value,
            ).all()

        booked_slots = {row.slot for row in rows}

        return [
            schemas.SlotAvailability(slot=slot, label=label, available=slot not in booked_slots)
            for slot, label in self.catalog.items()
        ]

    def create_booking(
        self,
        date: Optional[str],
        slot: Optional[int],
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Insert a booked row and return its id.

        The slot is not checked here for being free: the unique index on
        active (date, slot) rows rejects the second insert, which also covers
        two requests racing for the same slot.
        """
        if slot is None:
            raise InvalidInput("Missing required fields: date and slot")
        date = _required_date(date)

        booking = Booking(
            date=date,
            slot=slot,
            name=name,
            phone=phone,
            email=email,
            address=address,
            notes=notes,
            status=BookingStatus.BOOKED.value,
        )

        try:
            self.db.add(booking)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Slot conflict for {date} slot {slot}")
            raise SlotConflict()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while booking {date} slot {slot}: {e}")
            raise StoreUnavailable() from e

        with self._store():
            self.db.refresh(booking)

        logger.info(f"New booking #{booking.id}: {date} slot {slot}")

        if self._notifications_on:
            record = self._record(booking)
            self.dispatch(self.notifier.booking_created, record)
            if record.email:
                self.dispatch(self.notifier.booking_received, record)

        return booking.id

    def list_bookings(
        self,
        date: Optional[str] = None,
        include_all: bool = False,
        today: Optional[str] = None,
    ) -> List[Booking]:
        """Bookings for one date (any status), or upcoming active bookings.

        ``include_all`` returns every booking ever made when no date is given.
        """
        with self._store():
            query = self.db.query(Booking)

            if date and date.strip():
                query = query.filter(Booking.date == date.strip())
            elif not include_all:
                today = today or datetime.date.today().isoformat()
                query = query.filter(
                    Booking.status == BookingStatus.BOOKED.value,
                    Booking.date >= today,
                )

            return query.order_by(Booking.date, Booking.slot, Booking.id).all()

    def get_booking(self, booking_id: int) -> Booking:
        with self._store():
            booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    def cancel_booking(self, booking_id: Optional[int]) -> Booking:
        return self._transition(booking_id, BookingStatus.CANCELED)

    def complete_booking(self, booking_id: Optional[int]) -> Booking:
        return self._transition(booking_id, BookingStatus.COMPLETED)

    def _transition(self, booking_id: Optional[int], target: BookingStatus) -> Booking:
        if booking_id is None:
            raise InvalidInput("Missing required field: id")

        booking = self.get_booking(booking_id)

        # Repeating a transition that already happened changes nothing
        if booking.status == target.value:
            logger.info(f"Booking #{booking_id} already {target.value}")
            return booking

        if booking.status != BookingStatus.BOOKED.value:
            raise InvalidTransition(f"Booking {booking_id} is already {booking.status}")

        # Only a row that is still booked changes, so a concurrent request
        # that got there first wins and this one sees rowcount 0
        with self._store():
            result = self.db.execute(
                update(Booking)
                .where(Booking.id == booking_id, Booking.status == BookingStatus.BOOKED.value)
                .values(status=target.value)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            self.db.refresh(booking)

        if result.rowcount == 0:
            if booking.status == target.value:
                logger.info(f"Booking #{booking_id} already {target.value}")
                return booking
            raise InvalidTransition(f"Booking {booking_id} is already {booking.status}")

        logger.info(f"Booking #{booking_id} {target.value}")

        if self._notifications_on:
            self.dispatch(self.notifier.booking_status_changed, self._record(booking))
        return booking
