"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import os
import pytest
import tempfile

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'bookings_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    # Ensure test database path is set
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database after all tests
    for path in (TEST_DB_PATH, TEST_DB_PATH + '-wal', TEST_DB_PATH + '-shm'):
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def app():
    """Create test application with isolated database."""
    from app import create_app
    from database import init_db

    # Ensure test database path
    os.environ['DATABASE_PATH'] = TEST_DB_PATH

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = TEST_DB_PATH

    with app.app_context():
        init_db()
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def services(app):
    """Booking services of the test application (SQLite backed)."""
    from models.services import get_services
    return get_services()


@pytest.fixture
def memory_repository():
    """In-memory repository with the seed rooms and restrictions."""
    from models.memory_repository import MemoryReservationRepository
    return MemoryReservationRepository()


@pytest.fixture
def flow(memory_repository):
    """Booking flow over a plain dict session and the in-memory repository."""
    from models.availability import AvailabilityEngine
    from models.booking_flow import BookingFlow
    from models.reservation_writer import ReservationWriter

    engine = AvailabilityEngine(memory_repository)
    writer = ReservationWriter(memory_repository, engine)
    return BookingFlow({}, engine, writer)
