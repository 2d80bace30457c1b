"""Shared test fixtures."""
import pytest
from fastapi.testclient import TestClient

from repair_booking.config import Settings
from repair_booking.database import init_db, make_engine, make_session_factory
from repair_booking.main import create_app
from repair_booking.services import BookingService


class RecordingNotifier:
    """Stands in for EmailNotifier and remembers what it was asked to send."""

    def __init__(self):
        self.sent = []

    async def booking_created(self, booking):
        self.sent.append(("booking_created", booking))

    async def booking_received(self, booking):
        self.sent.append(("booking_received", booking))

    async def booking_status_changed(self, booking):
        self.sent.append(("booking_status_changed", booking))


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", admin_user="admin", admin_pass="secret")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(settings, notifier):
    """Test client over a fresh in-memory database."""
    app = create_app(settings, notifier=notifier)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    init_db(engine)
    session = make_session_factory(engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def dispatched():
    """(message name, booking record) pairs handed to the background dispatcher."""
    return []


@pytest.fixture
def service(db, notifier, dispatched):
    return BookingService(
        db,
        notifier=notifier,
        dispatch=lambda func, record: dispatched.append((func.__name__, record)),
    )
