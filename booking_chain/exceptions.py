"""Errors raised for malformed input at the package boundary.

Resolver functions never raise for "nothing bookable"; they return None or an
empty list. These exceptions are reserved for data that cannot be interpreted.
"""


class BookingEngineError(ValueError):
    """Base class for boundary validation errors."""


class InvalidTimeError(BookingEngineError):
    """A time ("HH:mm") or date ("YYYY-MM-DD") string could not be parsed."""


class BookingDataError(BookingEngineError):
    """A raw booking document is missing required fields or has bad values."""
