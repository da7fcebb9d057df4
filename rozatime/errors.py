"""Exceptions raised while evaluating the Ramadan segment."""


class SegmentError(Exception):
    """Base class for failures that disable the segment."""


class LocationNotConfigured(SegmentError):
    """Neither city+country nor latitude+longitude is configured."""

    def __init__(self, message: str = "no location configured: set city+country or latitude+longitude"):
        super().__init__(message)


class TransportError(SegmentError):
    """The Aladhan lookup could not be completed."""


class DecodeError(SegmentError):
    """The Aladhan response did not have the expected shape."""


class TimeParseError(SegmentError, ValueError):
    """A prayer time string is not a valid HH:MM value."""

    def __init__(self, value: str, field: str = None):
        self.value = value
        self.field = field
        if field:
            message = f"failed to parse {field} time: {value!r}"
        else:
            message = f"invalid HH:MM time: {value!r}"
        super().__init__(message)
