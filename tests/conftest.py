"""Shared test fixtures."""
from datetime import date, time

import pytest
from fastapi.testclient import TestClient

from salon_booking.api.database_models import AvailableSlot, Booking, Service, Staff, User
from salon_booking.auth import hash_password
from salon_booking.config import Settings
from salon_booking.database import create_session_factory, create_store_engine, init_database

TEST_SECRET = "test-secret"
BOOKING_DATE = date(2024, 1, 1)


@pytest.fixture
def settings() -> Settings:
    """Settings with a known signing secret."""
    return Settings(jwt_secret=TEST_SECRET, database_url_override="sqlite://")


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_store_engine("sqlite://")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    """Store session for calling services directly."""
    with session_factory() as session:
        yield session


@pytest.fixture
def catalog(session_factory):
    """
    Seed one customer, two staff members, two services and Anna's
    published slots for BOOKING_DATE.

    Returns:
        Dict of seeded ids
    """
    with session_factory() as session:
        customer = User(username="customer", password_hash=hash_password("customer-pass"))
        anna = Staff(name="Anna", specialty="Color")
        ben = Staff(name="Ben", specialty="Cuts")
        haircut = Service(name="Haircut", description="Wash and cut", duration_minutes=60, price=45.0)
        manicure = Service(name="Manicure", duration_minutes=30, price=25.0)
        session.add_all([customer, anna, ben, haircut, manicure])
        session.flush()

        session.add_all([
            AvailableSlot(staff_id=anna.id, slot_date=BOOKING_DATE, time_slot=time(hour))
            for hour in (9, 10, 11, 12)
        ])
        session.commit()

        return {
            "customer_id": customer.id,
            "staff_id": anna.id,
            "other_staff_id": ben.id,
            "service_id": haircut.id,
        }


@pytest.fixture
def add_booking(session_factory, catalog):
    """Insert a booking directly, bypassing the overlap check."""
    def _add(start: time, end: time, staff_id: int = None, booking_date: date = BOOKING_DATE):
        with session_factory() as session:
            booking = Booking(
                customer_id=catalog["customer_id"],
                service_id=catalog["service_id"],
                staff_id=staff_id or catalog["staff_id"],
                booking_date=booking_date,
                start_time=start,
                end_time=end
            )
            session.add(booking)
            session.commit()
            return booking.id
    return _add


@pytest.fixture
def client(settings, engine):
    """FastAPI test client running the app lifespan against the test engine."""
    from salon_booking.api_server import create_app

    app = create_app(settings=settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client
