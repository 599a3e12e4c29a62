"""Salon booking API: authentication, catalog, availability and bookings."""

__version__ = "1.0.0"
