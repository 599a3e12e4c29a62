"""Concurrent booking requests for the same slot.

Uses a file-backed SQLite database so every worker gets its own
connection and the transactions really contend.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import date, time

import pytest

from salon_booking.api.database_models import Booking, Service, Staff, User
from salon_booking.auth import hash_password
from salon_booking.bookings import create_booking
from salon_booking.database import create_session_factory, create_store_engine, init_database
from salon_booking.errors import ConflictError

WORKERS = 8


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_store_engine(f"sqlite:///{tmp_path / 'salon.db'}")
    init_database(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded(file_session_factory):
    with file_session_factory() as session:
        customer = User(username="customer", password_hash=hash_password("pass"))
        staff = Staff(name="Anna")
        service = Service(name="Haircut")
        session.add_all([customer, staff, service])
        session.commit()
        return {"customer_id": customer.id, "staff_id": staff.id, "service_id": service.id}


def _attempt(session_factory, ids, start, end):
    with session_factory() as session:
        try:
            create_booking(
                session,
                booking_date=date(2024, 1, 1),
                start_time=start,
                end_time=end,
                **ids
            )
            return "created"
        except ConflictError:
            return "conflict"


def test_identical_concurrent_requests_create_one_booking(file_session_factory, seeded):
    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(
            lambda _: _attempt(file_session_factory, seeded, time(10), time(11)),
            range(WORKERS)
        ))

    assert outcomes.count("created") == 1
    assert outcomes.count("conflict") == WORKERS - 1

    with file_session_factory() as session:
        assert session.query(Booking).count() == 1


def test_concurrent_overlapping_requests_create_one_booking(file_session_factory, seeded):
    """Different but overlapping intervals race for the same staff member."""
    intervals = [(time(10), time(11)), (time(10, 30), time(11, 30)), (time(10, 15), time(11, 15))]

    with ThreadPoolExecutor(max_workers=len(intervals)) as pool:
        outcomes = list(pool.map(
            lambda interval: _attempt(file_session_factory, seeded, *interval),
            intervals
        ))

    assert outcomes.count("created") == 1

    with file_session_factory() as session:
        assert session.query(Booking).count() == 1
