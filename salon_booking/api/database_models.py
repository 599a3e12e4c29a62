"""SQLAlchemy database models for the booking store."""
from datetime import datetime, UTC

from sqlalchemy import (
    Column, Integer, String, Float, Date, Time, DateTime, ForeignKey,
    UniqueConstraint, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now():
    """Get current UTC timestamp."""
    return datetime.now(UTC)


class User(Base):
    """Customer account; the password column holds a bcrypt hash."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True, index=True)
    password_hash = Column("password", String(255), nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class Service(Base):
    """Bookable salon service."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    price = Column(Float, nullable=True)

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name})>"


class Staff(Base):
    """Staff member who performs services."""
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    specialty = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Staff(id={self.id}, name={self.name})>"


class AvailableSlot(Base):
    """Published opening for a staff member on a date."""
    __tablename__ = "available_slots"
    __table_args__ = (
        UniqueConstraint("staff_id", "date", "time_slot", name="uq_slot_staff_date_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False, index=True)
    slot_date = Column("date", Date, nullable=False)
    time_slot = Column(Time, nullable=False)

    def __repr__(self):
        return f"<AvailableSlot(staff={self.staff_id}, date={self.slot_date}, time={self.time_slot})>"


class Booking(Base):
    """Customer booking of a service with a staff member."""
    __tablename__ = "bookings"
    __table_args__ = (
        # Two bookings may never start at the same time for one staff member
        UniqueConstraint("staff_id", "booking_date", "start_time", name="uq_booking_staff_start"),
        Index("ix_bookings_staff_date", "staff_id", "booking_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    notes = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, staff={self.staff_id}, "
            f"date={self.booking_date}, {self.start_time}-{self.end_time})>"
        )
