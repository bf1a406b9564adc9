"""focus-space: bookings, courses and testimonials for the Focus Space studio."""

__version__ = "0.1.0"
