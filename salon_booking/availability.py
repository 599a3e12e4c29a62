"""Free time slots for a staff member on a given date.

A slot is free when no booking for the same staff member and date
starts at that time. Slots that fall inside a booking's interval without
sharing its start time are still reported as free.
"""
from datetime import date, time
from typing import List, Optional

from sqlalchemy.orm import Session

from salon_booking.api.database_models import AvailableSlot, Booking
from salon_booking.database import store_errors
from salon_booking.errors import ValidationError


def get_available_slots(db: Session, staff_id: Optional[int], slot_date: Optional[date]) -> List[time]:
    """
    Published slots for (staff_id, slot_date) minus booked start times.

    Args:
        db: Store session
        staff_id: Staff member
        slot_date: Day to inspect

    Returns:
        Free slot times, in published (chronological) order

    Raises:
        ValidationError: If staff_id or slot_date is missing
        StoreError: Database failure
    """
    if not staff_id or not slot_date:
        raise ValidationError("staffId and date are required")

    with store_errors("Failed to fetch available slots"):
        published = db.query(AvailableSlot.time_slot).filter(
            AvailableSlot.staff_id == staff_id,
            AvailableSlot.slot_date == slot_date
        ).order_by(AvailableSlot.time_slot).all()

        booked = {
            row.start_time
            for row in db.query(Booking.start_time).filter(
                Booking.staff_id == staff_id,
                Booking.booking_date == slot_date
            )
        }

    return [row.time_slot for row in published if row.time_slot not in booked]
