"""Read-only catalog of services and staff."""
from typing import List

from sqlalchemy.orm import Session

from salon_booking.api.database_models import Service, Staff
from salon_booking.database import store_errors


def list_services(db: Session) -> List[Service]:
    """Return every service ordered by id."""
    with store_errors("Failed to fetch services"):
        return db.query(Service).order_by(Service.id).all()


def list_staff(db: Session) -> List[Staff]:
    """Return every staff member ordered by id."""
    with store_errors("Failed to fetch staff"):
        return db.query(Staff).order_by(Staff.id).all()
