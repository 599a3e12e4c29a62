"""Booking creation with the per-staff no-overlap rule.

The overlap check and the insert run in one transaction. The staff row is
locked first (SELECT ... FOR UPDATE; SQLite takes its write lock at BEGIN),
so two requests for the same staff member cannot both pass the check. The
unique constraint on (staff_id, booking_date, start_time) backs this up.
"""
from datetime import date, time
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_booking.api.database_models import Booking, Service, Staff, User
from salon_booking.database import store_errors
from salon_booking.errors import ConflictError, ValidationError
from salon_booking.logging_config import get_logger

logger = get_logger(__name__)

SLOT_ALREADY_BOOKED = "Slot already booked"


def _find_conflict(
    db: Session,
    staff_id: int,
    booking_date: date,
    start_time: time,
    end_time: time
) -> Optional[Booking]:
    """First booking of the staff member that day overlapping [start, end)."""
    return db.query(Booking).filter(
        Booking.staff_id == staff_id,
        Booking.booking_date == booking_date,
        or_(
            and_(Booking.start_time < end_time, Booking.end_time > start_time),
            Booking.start_time == start_time
        )
    ).first()


def create_booking(
    db: Session,
    customer_id: Optional[int],
    service_id: Optional[int],
    staff_id: Optional[int],
    booking_date: Optional[date],
    start_time: Optional[time],
    end_time: Optional[time],
    notes: Optional[str] = None
) -> Booking:
    """
    Validate and persist a booking.

    Args:
        db: Store session (the transaction is committed here)
        customer_id: Booking user
        service_id: Requested service
        staff_id: Staff member performing the service
        booking_date: Day of the booking
        start_time: Inclusive start
        end_time: Exclusive end
        notes: Optional free text

    Returns:
        The stored Booking

    Raises:
        ValidationError: Missing fields, empty interval, unknown staff/service/customer
        ConflictError: Interval overlaps an existing booking
        StoreError: Database failure
    """
    required = {
        "customer_id": customer_id,
        "service_id": service_id,
        "staff_id": staff_id,
        "booking_date": booking_date,
        "start_time": start_time,
        "end_time": end_time,
    }
    missing = [name for name, value in required.items() if value is None or value == ""]
    if missing:
        logger.warning("booking_missing_fields", missing_fields=missing)
        raise ValidationError("Missing required fields", missing_fields=missing)

    if end_time <= start_time:
        raise ValidationError("end_time must be after start_time")

    with store_errors("Failed to create booking"):
        staff = db.query(Staff).filter(Staff.id == staff_id).with_for_update().first()
        if staff is None:
            db.rollback()
            raise ValidationError(f"Unknown staff member {staff_id}")

        if db.get(Service, service_id) is None:
            db.rollback()
            raise ValidationError(f"Unknown service {service_id}")

        if db.get(User, customer_id) is None:
            db.rollback()
            raise ValidationError(f"Unknown customer {customer_id}")

        conflict = _find_conflict(db, staff_id, booking_date, start_time, end_time)
        if conflict is not None:
            db.rollback()
            logger.info(
                "booking_conflict",
                staff_id=staff_id,
                booking_date=str(booking_date),
                start_time=str(start_time),
                conflicting_booking_id=conflict.id
            )
            raise ConflictError(SLOT_ALREADY_BOOKED)

        booking = Booking(
            customer_id=customer_id,
            service_id=service_id,
            staff_id=staff_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            notes=notes or None
        )
        db.add(booking)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.info("booking_conflict_on_commit", staff_id=staff_id, error=str(e))
            raise ConflictError(SLOT_ALREADY_BOOKED) from e

    logger.info(
        "booking_created",
        booking_id=booking.id,
        staff_id=staff_id,
        booking_date=str(booking_date),
        start_time=str(start_time)
    )
    return booking
